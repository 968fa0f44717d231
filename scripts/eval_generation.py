#!/usr/bin/env python3
from __future__ import annotations

import argparse
import asyncio
import json
from collections import Counter
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any


def _repo_root() -> Path:
    return Path(__file__).resolve().parents[1]


def _bootstrap_pythonpath() -> None:
    import sys

    src = _repo_root() / "src"
    if str(src) not in sys.path:
        sys.path.insert(0, str(src))


_bootstrap_pythonpath()

from resomate.config import get_settings  # noqa: E402
from resomate.generation.models import DocumentKind, Failure, GenerationRequest  # noqa: E402
from resomate.generation.pipeline import GenerationPipeline  # noqa: E402


@dataclass
class Sample:
    request: GenerationRequest
    note: str = ""


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Report which generation tier served each sample request.")
    parser.add_argument(
        "--input",
        default="eval/generation_requests.sample.jsonl",
        help="JSONL file with fields: kind, topic, and optional title/country/committee/... plus note.",
    )
    parser.add_argument(
        "--output-md",
        default="",
        help="Markdown report path. Default: eval/reports/generation_eval_<timestamp>.md",
    )
    parser.add_argument(
        "--output-json",
        default="",
        help="JSON report path. Default: eval/reports/generation_eval_<timestamp>.json",
    )
    parser.add_argument("--limit", type=int, default=0, help="Limit evaluated samples (0 means all).")
    return parser.parse_args()


def load_samples(path: Path, limit: int) -> list[Sample]:
    samples: list[Sample] = []
    with path.open("r", encoding="utf-8") as f:
        for line_no, line in enumerate(f, start=1):
            raw = line.strip()
            if not raw:
                continue
            row = json.loads(raw)
            note = str(row.pop("note", "")).strip()
            try:
                kind = DocumentKind(str(row.pop("kind", "")).strip().lower())
                request = GenerationRequest(kind=kind, **row)
            except (TypeError, ValueError) as exc:
                raise ValueError(f"Invalid sample at line {line_no}: {exc}") from exc
            if not request.topic.strip():
                raise ValueError(f"Invalid sample at line {line_no}: topic required")
            samples.append(Sample(request=request, note=note))
            if limit > 0 and len(samples) >= limit:
                break
    if not samples:
        raise ValueError("No samples loaded.")
    return samples


async def run_samples(samples: list[Sample]) -> tuple[list[dict[str, Any]], GenerationPipeline]:
    pipeline = GenerationPipeline(get_settings())
    rows: list[dict[str, Any]] = []
    for sample in samples:
        result = await pipeline.generate(sample.request)
        if isinstance(result, Failure):
            rows.append(
                {
                    "kind": sample.request.kind.value,
                    "topic": sample.request.topic,
                    "tier": "",
                    "attempts": 0,
                    "failure": result.kind.value,
                    "note": sample.note,
                }
            )
            continue
        rows.append(
            {
                "kind": sample.request.kind.value,
                "topic": sample.request.topic,
                "tier": result.tier,
                "attempts": result.attempts,
                "failure": "",
                "note": sample.note,
            }
        )
    return rows, pipeline


def compute_metrics(rows: list[dict[str, Any]], pipeline: GenerationPipeline) -> dict[str, Any]:
    total = len(rows)
    served = Counter(row["tier"] or "failed" for row in rows)
    by_kind: dict[str, dict[str, int]] = {}
    for row in rows:
        bucket = by_kind.setdefault(row["kind"], {})
        tier = row["tier"] or "failed"
        bucket[tier] = bucket.get(tier, 0) + 1
    transitions = {
        f"{kind}/{tier}/{outcome}": count for (kind, tier, outcome), count in sorted(pipeline.tier_counts.items())
    }
    model_rate = (served.get("primary", 0) + served.get("secondary", 0)) / max(total, 1)
    return {
        "total": total,
        "served_by_tier": dict(served),
        "served_by_kind": by_kind,
        "model_served_rate": model_rate,
        "tier_transitions": transitions,
    }


def _fmt_pct(x: float) -> str:
    return f"{x * 100:.2f}%"


def build_markdown_report(input_path: str, metrics: dict[str, Any], rows: list[dict[str, Any]]) -> str:
    lines: list[str] = []
    lines.append("# Generation Tier Report")
    lines.append("")
    lines.append(f"- input: `{input_path}`")
    lines.append(f"- total: `{metrics['total']}`")
    lines.append(f"- served by a model tier: `{_fmt_pct(metrics['model_served_rate'])}`")
    lines.append("")
    lines.append("## Served By Tier")
    lines.append("")
    lines.append("| kind | primary | secondary | fallback | failed |")
    lines.append("|---|---:|---:|---:|---:|")
    for kind, bucket in sorted(metrics["served_by_kind"].items()):
        lines.append(
            f"| {kind} | {bucket.get('primary', 0)} | {bucket.get('secondary', 0)} | "
            f"{bucket.get('fallback', 0)} | {bucket.get('failed', 0)} |"
        )
    lines.append("")
    lines.append("## Tier Transitions")
    lines.append("")
    if not metrics["tier_transitions"]:
        lines.append("- none")
    for key, count in metrics["tier_transitions"].items():
        lines.append(f"- `{key}`: {count}")
    lines.append("")
    lines.append("## Degraded Requests")
    lines.append("")
    degraded = [r for r in rows if r["tier"] != "primary"]
    if not degraded:
        lines.append("- none")
    else:
        for item in degraded[:30]:
            lines.append(
                f"- kind=`{item['kind']}` topic=`{item['topic']}` tier=`{item['tier'] or 'failed'}` "
                f"failure=`{item['failure']}` note=`{item['note']}`"
            )
    lines.append("")
    return "\n".join(lines)


def write_report(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


async def main() -> int:
    args = parse_args()
    input_path = Path(args.input)
    samples = load_samples(input_path, args.limit)
    rows, pipeline = await run_samples(samples)
    metrics = compute_metrics(rows, pipeline)

    now = datetime.now().strftime("%Y%m%d_%H%M%S")
    md_path = Path(args.output_md) if args.output_md else Path(f"eval/reports/generation_eval_{now}.md")
    json_path = Path(args.output_json) if args.output_json else Path(f"eval/reports/generation_eval_{now}.json")

    write_report(md_path, build_markdown_report(str(input_path), metrics, rows))
    write_report(
        json_path,
        json.dumps(
            {
                "input": str(input_path),
                "metrics": metrics,
                "rows": rows,
            },
            ensure_ascii=False,
            indent=2,
        ),
    )

    print(f"[generation-eval] model_served={_fmt_pct(metrics['model_served_rate'])} total={metrics['total']}")
    print(f"[generation-eval] markdown={md_path}")
    print(f"[generation-eval] json={json_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(asyncio.run(main()))
