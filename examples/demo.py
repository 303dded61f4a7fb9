#!/usr/bin/env python3
"""
smallstep Feature Demonstration

This script walks through the major features of the smallstep library.
"""

from itertools import islice

from smallstep import (
    Add, Environment, Evaluator, Number, Program, ReadVariable, ReduceConstant,
    Sequence, TermKind, WriteVariable, DEFAULT_SEMANTICS, NULL_WRITE_SEMANTICS,
    RIGHT_TO_LEFT_SEMANTICS, evaluate, format_rule_vertical,
)


def section(title: str):
    """Print a section header."""
    print(f"\n{'='*60}")
    print(f" {title}")
    print('='*60)


def indented(text: str, prefix: str = "    "):
    for line in text.split("\n"):
        print(f"{prefix}{line}")


def demo_basic_usage():
    """Evaluate a few closed terms."""
    section("Basic Usage")

    examples = [
        Number(10),
        Add(Number(1), Number(2)),
        Add(Number(1), Add(Number(2), Number(3))),
    ]

    for term in examples:
        result = evaluate(term)
        print(f"  {term} => {result.program}")


def demo_rules():
    """Show the default rule table."""
    section("Rules")

    for kind, rules in DEFAULT_SEMANTICS:
        print(f"  {kind.value}:")
        for rule in rules:
            print(f"    {rule.name:20} {rule}")

    print("\n  Vertical layout:")
    indented(format_rule_vertical(DEFAULT_SEMANTICS.rules_for(TermKind.ADD)[0]))


def demo_environment():
    """Reads and writes thread an environment."""
    section("Environments")

    env = Environment(a=Add(Number(4), Number(3)))
    result = evaluate(Add(ReadVariable("a"), Number(2)), env)
    print(f"  Stored expression: {result.trace.initial} => {result.program}")

    term = Sequence(WriteVariable("a", Number(3)), ReadVariable("a"))
    print(f"  Sequence: {term} => {evaluate(term).program}")
    print(f"  Sequence (null writes): {term} => "
          f"{evaluate(term, semantics=NULL_WRITE_SEMANTICS).program}")


def demo_tracing():
    """Demonstrate trace formatting."""
    section("Tracing")

    result = evaluate(Add(WriteVariable("a", Number(3)), ReadVariable("a")))

    print("  Table format (default):")
    indented(result.format())

    print(f"\n  Compact: {result.format('compact')}")
    print(f"  Rules: {result.format('rules')}")
    print(f"  Summary: {result.trace.summary()}")


def demo_failures():
    """Errors stop evaluation and are reported with the trace so far."""
    section("Failures")

    examples = [
        (Add(ReadVariable("a"), WriteVariable("a", Number(3))), DEFAULT_SEMANTICS),
        (Add(WriteVariable("a", Number(3)), ReadVariable("a")), RIGHT_TO_LEFT_SEMANTICS),
        (Add(WriteVariable("a", Number(3)), Number(2)), NULL_WRITE_SEMANTICS),
    ]

    for term, semantics in examples:
        result = evaluate(term, semantics=semantics)
        print(f"  {term} under {semantics.name}:")
        indented(result.format())


def demo_custom_semantics():
    """Swap rules to change the language."""
    section("Custom Semantics")

    zero_reads = DEFAULT_SEMANTICS.with_rules(
        TermKind.READ, [ReduceConstant(ReadVariable, Number(0))], name="zero-reads")
    term = Add(ReadVariable("a"), Number(2))
    print(f"  {term} under zero-reads => {evaluate(term, semantics=zero_reads).program}")

    # A read that rewrites to itself never reaches a value
    looping = DEFAULT_SEMANTICS.with_rules(
        TermKind.READ, [ReduceConstant(ReadVariable, ReadVariable("a"))])
    steps = list(islice(Evaluator(looping).iterate(Program(ReadVariable("a"))), 3))
    print(f"  Looping read, first {len(steps)} steps: "
          + ", ".join(str(s.after) for s in steps))


def main():
    """Run all demonstrations."""
    print("smallstep - small-step operational semantics by term rewriting")
    print("Feature Demonstration")

    demo_basic_usage()
    demo_rules()
    demo_environment()
    demo_tracing()
    demo_failures()
    demo_custom_semantics()

    print("\n" + "="*60)
    print(" Demo complete!")
    print("="*60)


if __name__ == "__main__":
    main()
