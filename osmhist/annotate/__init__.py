"""Matching of child versions to parent versions, with options, errors and relation ordering."""