"""
Core building blocks: the nucleotide alphabet and the integer-list parsers shared by every line of a compressed
target.
"""
