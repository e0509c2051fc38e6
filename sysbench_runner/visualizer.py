import logging

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402

from sysbench_runner.report import measured  # noqa: E402

logger = logging.getLogger("SYSBENCH")

SERIES = {
    "iops": [("reads_per_sec", "reads/s"), ("writes_per_sec", "writes/s")],
    "bw": [("read_mib_per_sec", "read MiB/s"), ("written_mib_per_sec", "written MiB/s")],
}


def generate_plot(results, metric, out_path):
    rows = measured(results)
    if not rows:
        logger.warning("No data to plot.")
        return None

    modes = [result.mode for result in rows]
    series = SERIES[metric]
    width = 0.8 / len(series)

    plt.figure(figsize=(6, 4))
    for idx, (field, label) in enumerate(series):
        positions = [pos + idx * width for pos in range(len(modes))]
        plt.bar(positions, [getattr(result.metrics, field) for result in rows], width=width, label=label)
    plt.xticks([pos + width * (len(series) - 1) / 2 for pos in range(len(modes))], modes)
    plt.title(f"sysbench fileio {metric.upper()}")
    plt.xlabel("Mode")
    plt.ylabel("ops/s" if metric == "iops" else "MiB/s")
    plt.legend()
    plt.tight_layout()
    plt.savefig(out_path)
    plt.close()
    logger.info(f"Plot saved to {out_path}")
    return out_path
