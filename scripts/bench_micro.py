from __future__ import annotations

import argparse
import csv
import json
import sys
import time
from pathlib import Path
from statistics import mean, pstdev

GRAPHS = ["dense", "conv", "recurrent"]


def _fmt_mu_sigma(vals):
    mu = mean(vals)
    sd = pstdev(vals) if len(vals) > 1 else 0.0
    return f"{mu:.2f} ± {sd:.2f}"


def _build(kind, seed):
    import numpy as np

    from neurograph import LayerKind, NeuralNet

    K = LayerKind
    rng = np.random.default_rng(seed)
    if kind == "dense":
        net = NeuralNet(64, rng=rng)
        net.add_dense(64, 128)
        net.add_dense(128, 128)
        net.add_dense(128, 10)
        net.link_layers(K.INPUT, 0, 0, 64, K.DENSE, 0)
        net.link_layers(K.DENSE, 0, 0, 128, K.DENSE, 1)
        net.link_layers(K.DENSE, 1, 0, 128, K.DENSE, 2)
    elif kind == "conv":
        net = NeuralNet(28 * 28, rng=rng)
        net.add_conv2d(28, 28)
        for _ in range(4):
            net.conv2d(0).add_filter(5, 5)
        net.add_pool(24, 24 * 4)
        net.pool(0).add_pool(2, 2)
        net.pool(0).set_stride(0, 2, 2)
        net.add_dense(net.pool(0).output_len(), 10)
        net.link_layers(K.INPUT, 0, 0, 28 * 28, K.CONV2D, 0)
        net.link_layers(K.CONV2D, 0, 0, 24 * 24 * 4, K.POOL, 0)
        net.link_layers(K.POOL, 0, 0, net.pool(0).output_len(), K.DENSE, 0)
    else:
        net = NeuralNet(16, rng=rng)
        net.add_lstm(16, 32, 8)
        net.add_gru(32, 16, 8)
        net.add_dense(16, 4)
        net.link_layers(K.INPUT, 0, 0, 16, K.LSTM, 0)
        net.link_layers(K.LSTM, 0, 0, 32, K.GRU, 0)
        net.link_layers(K.GRU, 0, 0, 16, K.DENSE, 0)
    net.sort_edges()
    return net, rng.normal(size=net.inputs)


def time_runs(kind, seed, steps):
    net, x = _build(kind, seed)
    start = time.perf_counter()
    for _ in range(steps):
        out = net.run(x)
    elapsed = time.perf_counter() - start
    return {"us_per_run": 1e6 * elapsed / steps, "output_len": int(out.shape[0])}


def main():
    root = Path(__file__).resolve().parents[1]
    if str(root) not in sys.path:
        sys.path.insert(0, str(root))

    ap = argparse.ArgumentParser()
    ap.add_argument("--seeds", nargs="+", type=int, default=[123, 124, 125])
    ap.add_argument("--steps", type=int, default=64)
    ap.add_argument("--out", type=str, default=".artifacts/bench")
    args = ap.parse_args()

    out = Path(args.out)
    out.mkdir(parents=True, exist_ok=True)
    runs = []
    for kind in GRAPHS:
        for s in args.seeds:
            r = time_runs(kind, seed=s, steps=args.steps)
            runs.append({"graph": kind, "seed": s, **r})
    (out / "results.jsonl").write_text(
        "\n".join(json.dumps(x) for x in runs), encoding="utf-8"
    )

    csv_path = out / "bench_micro.csv"
    with csv_path.open("w", newline="", encoding="utf-8") as f:
        w = csv.writer(f)
        w.writerow(["graph", "seeds", "steps", "us_per_run_mu", "us_per_run_sd"])
        for kind in GRAPHS:
            times = [r["us_per_run"] for r in runs if r["graph"] == kind]
            w.writerow(
                [
                    kind,
                    len(times),
                    args.steps,
                    f"{mean(times):.2f}",
                    f"{pstdev(times) if len(times) > 1 else 0.0:.2f}",
                ]
            )

    md_path = out / "bench_micro.md"
    lines = ["### Micro-Benchmark: forward pass latency", ""]
    lines.append(f"- Seeds: `{args.seeds}`; Steps: `{args.steps}`")
    lines.append("")
    lines.append("| Graph | µs per run (μ±σ) | Output | Seeds | Steps |")
    lines.append("|---|---:|---:|---:|---:|")
    for kind in GRAPHS:
        rows = [r for r in runs if r["graph"] == kind]
        lines.append(
            f"| {kind.upper()} | {_fmt_mu_sigma([r['us_per_run'] for r in rows])} | "
            f"{rows[0]['output_len']} | {len(rows)} | {args.steps} |"
        )
    md_path.write_text("\n".join(lines), encoding="utf-8")
    print("Wrote:", csv_path, md_path)


if __name__ == "__main__":
    main()
