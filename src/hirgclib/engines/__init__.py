"""
Engines that turn a parsed compressed target back into sequence: replay against the reference, then the overlay
passes.
"""
