#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Mood report for a journal export (JSON array or JSONL).
Usage:
  python ai/tools/mood_report.py --src backups/journal.json
  python ai/tools/mood_report.py --src backups/journal.jsonl --days 7 --tz Europe/Berlin
"""
import argparse
import json
import os
import sys
from collections import Counter

from mood_engine import config
from mood_engine.aggregator import reflections_count, summarize
from mood_engine.models import JournalEntry
from mood_engine.mood_scale import resolve_mood_tag


def load_rows(path):
    """Yield (position, row-or-None, error) for every record in the file."""
    with open(path, "r", encoding="utf-8") as f:
        text = f.read()
    if text.lstrip().startswith("["):
        try:
            arr = json.loads(text)
        except ValueError as e:
            yield 0, None, f"not valid JSON: {e}"
            return
        for i, row in enumerate(arr, start=1):
            yield i, row, None
        return
    for i, line in enumerate(text.splitlines(), start=1):
        line = line.strip()
        if not line:
            continue
        try:
            yield i, json.loads(line), None
        except ValueError:
            yield i, None, "not valid JSON"


def build_report(entries, days, tz, skipped):
    summary = summarize(entries, days, tz=tz)
    tag_kinds = Counter()
    for e in entries:
        tag = resolve_mood_tag(e.tags)
        tag_kinds[type(tag).__name__ if tag is not None else "none"] += 1
    report = summary.to_dict()
    report["reflections"] = reflections_count(entries)
    report["mood_sources"] = dict(tag_kinds)
    report["skipped"] = skipped
    return report


def main(argv=None):
    ap = argparse.ArgumentParser(description="Mood statistics for a journal export")
    ap.add_argument("--src", required=True)
    ap.add_argument("--days", type=int, default=config.MOOD_DEFAULT_WINDOW_DAYS)
    ap.add_argument("--tz", default=None, help="IANA zone for day buckets (default: MOOD_LOCAL_TZ / system)")
    args = ap.parse_args(argv)

    if not os.path.exists(args.src):
        print(f"not found: {args.src}", file=sys.stderr)
        return 1

    entries = []
    skipped = 0
    for pos, row, err in load_rows(args.src):
        if err is None:
            try:
                entries.append(JournalEntry.from_dict(row))
                continue
            except ValueError as e:
                err = str(e)
        print(f"[skip] {pos}: {err}", file=sys.stderr)
        skipped += 1

    report = build_report(entries, args.days, config.local_timezone(args.tz), skipped)
    print(json.dumps(report, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
