"""
Basic Validity Study Example
============================

This example compares supervised and semi-supervised validity estimates for a
selection test. Shows whether adding unlabeled applicants (test score only,
criterion imputed by score matching) changes the estimated validity.
"""

import ssvalidity

# Example: a 30-item selection test validated against supervisor ratings
# Research question: do unlabeled applicants help estimate test validity?

print("=" * 60)
print("BASIC VALIDITY STUDY EXAMPLE")
print("=" * 60)

# 1. Define the grid: one validity, two labeled sizes, three unlabeled sizes
study = ssvalidity.ValidityStudy(
    population_validities=[0.4],
    labeled_sizes=[50, 100],
    unlabeled_sizes=[0, 200, 1000],
    replications=200,
    test_length=30,            # predictor mean = 0.67 * 30, SD = 0.10 * 30
    criterion_reliability=0.70,
    test_reliability=0.80,
    nmatch=5,                  # minimum donors per predictor score
)

print(f"\nConditions: {len(study.conditions)}")
print(f"Total replications: {study.total_replications}")

# 2. Run quietly with a progress bar, then print the summary
print("\n" + "=" * 60)
print("RESULTS")
print("=" * 60)
study.set_seed(42).set_verbose(0)
study.run(progress_callback=ssvalidity.PrintReporter())

# 3. Inspect the summary as a DataFrame
summary = study.summary_frame()
print("\nLargest |semi - sup| mean difference:")
print(summary.loc[summary["mean_difference"].abs().idxmax(), ["condition", "mean_difference"]])

# 4. Plot (requires matplotlib)
study.plot(show=False).savefig("validity_study.png")
print("\nPlot saved to validity_study.png")
