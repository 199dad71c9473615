"""Move validation helpers.

Every move, whichever transport it arrives on, flows through the same ordered
pipeline so rejections are classified identically everywhere.
"""
