"""Evaluation utilities for assessing collection runs.

This module computes simple quality metrics offline after a run by reading
the ``collection_summary.csv`` written to the ``outputs`` directory.
"""

from __future__ import annotations

import argparse
from typing import Any, Dict, Optional, Sequence

import pandas as pd


def evaluate_collection_summary(summary_path: str) -> Dict[str, Any]:
    """Summarise data quality, analysis coverage and processing time.

    Returns
    -------
    Dict[str, Any]
        ``runs``; ``data_quality`` (counts per tier); ``structured_blog_share``
        and ``structured_video_share`` (values between 0 and 1); and
        ``mean_processing_time`` in seconds.
    """
    df = pd.read_csv(summary_path)
    if df.empty:
        print("The summary contains no runs.")
        return {
            "runs": 0,
            "data_quality": {},
            "structured_blog_share": 0.0,
            "structured_video_share": 0.0,
            "mean_processing_time": 0.0,
        }

    quality = df["data_quality"].value_counts().reindex(["high", "medium", "low"], fill_value=0)
    metrics = {
        "runs": len(df),
        "data_quality": {tier: int(count) for tier, count in quality.items()},
        "structured_blog_share": float((df["blog_analysis"] == "structured").mean()),
        "structured_video_share": float((df["video_analysis"] == "structured").mean()),
        "mean_processing_time": float(df["processing_time"].mean()),
    }

    print(f"Runs evaluated: {metrics['runs']}")
    for tier, count in metrics["data_quality"].items():
        print(f"  data quality {tier}: {count}")
    print(f"Structured blog analyses: {metrics['structured_blog_share']*100:.2f}%")
    print(f"Structured video analyses: {metrics['structured_video_share']*100:.2f}%")
    print(f"Mean processing time: {metrics['mean_processing_time']:.2f}s")
    return metrics


def main(args: Optional[Sequence[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Evaluate Blog Scout collection runs")
    parser.add_argument(
        "--summary",
        type=str,
        required=True,
        help="Path to the collection_summary.csv produced by the run",
    )
    parsed_args = parser.parse_args(args=args)
    evaluate_collection_summary(parsed_args.summary)


if __name__ == "__main__":
    main()
