"""
Example custom semantics for smallstep.

This file shows how to build a rule table outside the library and use it
from the command line. Any Python file defining SEMANTICS works.

Usage:
    smallstep -s examples/custom_semantics.py read-then-write
    smallstep -s examples/custom_semantics.py --rules --vertical
"""

from smallstep import Number, WritePolicy, build_semantics

# Writes reduce to ∅ and unbound names read as 0
# Add reduces its right operand first
SEMANTICS = build_semantics(
    write_policy=WritePolicy.NULL,
    default_read=Number(0),
    left_to_right=False,
    name="lenient",
)

