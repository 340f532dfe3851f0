#!/usr/bin/env python3
"""
Complete Pipeline Demo: Schema → Question Tree → Overrides → Collection → Instance

Shows the full workflow:
1. Build and analyze the question tree of a hand-written schema
2. Register suggestions and assumptions
3. Collect the remaining answers with the scripted surface
4. Rebuild the instance and export its response store
"""

from elicit.analyzer import analyze_definition
from elicit.backends import ScriptedBackend
from elicit.examples import Preferences
from elicit.logging_setup import configure_logging
from elicit.path import ResponsePath
from elicit.serialization import nest_responses, responses_to_yaml

P = ResponsePath.root


def main():
    configure_logging()

    print("=" * 80)
    print("COMPLETE PIPELINE DEMO: Schema → Tree → Overrides → Collection → Instance")
    print("=" * 80)

    # =========================================================================
    # STEP 1: Question tree
    # =========================================================================
    print("\n1. ANALYZING QUESTION TREE...")
    report = analyze_definition(Preferences.survey())
    print(f"   ✓ Questions: {report.total_questions}")
    print(f"   ✓ Variants: {report.variant_count}")
    print(f"   ✓ Max depth: {report.max_depth}")
    for kind, count in sorted(report.kind_counts.items()):
        print(f"      {kind}: {count}")
    if report.warnings:
        print(f"\n   Warnings ({len(report.warnings)}):")
        for warning in report.warnings:
            print(f"      - {warning}")

    # =========================================================================
    # STEP 2: Overrides
    # =========================================================================
    print("\n2. REGISTERING OVERRIDES...")
    builder = (
        Preferences.builder()
        .suggest(P("username"), "guest")
        .assume(P("age"), 30)
    )
    prepared = builder.prepare()
    print(f"   ✓ Assumed values: {len(prepared.responses)}")
    print(f"   ✓ Questions left to ask: {len(prepared.definition)}")

    # =========================================================================
    # STEP 3: Collection
    # =========================================================================
    print("\n3. COLLECTING ANSWERS...")
    backend = (
        ScriptedBackend()
        .with_attempts(P("height"), 3.5, 1.8)  # first answer is out of bounds
        .with_answer(ResponsePath.of("features", "selected_variants"), [0, 1])
        .with_answer(ResponsePath.of("features", "1", "email"), True)
        .with_answer(ResponsePath.of("features", "1", "push"), False)
        .with_answer(P("tags"), ["demo"])
    )
    prefs = builder.run(backend)
    print(f"   ✓ {prefs}")

    # =========================================================================
    # STEP 4: Export
    # =========================================================================
    print("\n4. RESPONSE STORE (flat):")
    print("-" * 80)
    for line in responses_to_yaml(prefs.to_responses()).splitlines()[:20]:
        print(f"   {line}")

    print("\n   As an answer file:")
    print(f"   {nest_responses(prefs.to_responses())}")

    print("\n" + "=" * 80)
    print("PIPELINE COMPLETE!")
    print("=" * 80)


if __name__ == "__main__":
    main()
