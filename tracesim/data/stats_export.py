"""Statistics and exporter.
"""
import csv
import json
from typing import Dict, List

from tracesim.data.counters import PerfCounters


def export_chart_json(hit_rate_history: List[float], stats: Dict[str, float], fpath: str) -> str:
    """Export hit-rate history and stats to a JSON file. Returns the saved path.
    """
    data = {
        'hit_rate_history': list(hit_rate_history),
        'stats': stats
    }
    with open(fpath, 'w', encoding='utf-8') as fh:
        json.dump(data, fh, indent=2)
    return fpath


def sample_positions(count: int, sample_every: int = 1) -> List[int]:
    """Reference count at which each of `count` history samples was taken."""
    return [(i + 1) * sample_every for i in range(count)]


def export_chart_pdf(hit_rate_history: List[float], fpath: str, sample_every: int = 1) -> str:
    """Plot the cumulative hit ratio against the number of references
    simulated and save it as a PDF. Returns the saved file path.
    """
    # no display needed
    import matplotlib
    matplotlib.use('Agg')
    import matplotlib.pyplot as plt

    refs = sample_positions(len(hit_rate_history), sample_every)
    fig, ax = plt.subplots(figsize=(7, 3))
    if refs:
        ax.step(refs, hit_rate_history, where='post', color='#1f77b4', linewidth=1.5)
        ax.axhline(hit_rate_history[-1], color='grey', linestyle=':', linewidth=1,
                   label=f'final {hit_rate_history[-1]:.4f}')
        ax.legend(loc='lower right')
    ax.set_ylim(0, 1)
    ax.set_xlim(left=0)
    ax.set_xlabel('References simulated')
    ax.set_ylabel('Cumulative hit ratio')
    fig.tight_layout()
    fig.savefig(fpath, format='pdf')
    plt.close(fig)
    return fpath


class Exporter:
    FIELDS = [
        'instruction_references', 'instruction_misses',
        'data_read_references', 'data_read_misses',
        'data_write_references', 'data_write_misses',
        'references', 'hits', 'misses', 'hit_ratio', 'miss_ratio',
    ]

    @staticmethod
    def export_stats_csv(path: str, counters: PerfCounters):
        row = counters.as_dict()
        with open(path, 'w', newline='') as f:
            writer = csv.writer(f)
            writer.writerow(Exporter.FIELDS)
            writer.writerow([row[name] for name in Exporter.FIELDS])
        return path
