import matplotlib.pyplot as plt
import numpy as np

'''
Plots work on a list of FileReports: one group of bars per query,
one bar per file, heights in percent of the file's reads.
'''

def plot_match_percentages(reports, ax, width=0.8, rotate_labels=45):
    """
    reports: list of FileReport objects counted against the same queries
    ax: matplotlib Axes to draw on
    width: total width of one group of bars
    """
    if not reports:
        return ax
    names = [row[0] for row in reports[0].rows]
    x = np.arange(len(names))
    bar_width = width / len(reports)

    # rows are in the same query order for every report
    heights = np.array([[row[3] for row in report.rows] for report in reports])

    for i, report in enumerate(reports):
        offset = (i - (len(reports) - 1) / 2) * bar_width
        ax.bar(x + offset, heights[i], bar_width, label=report.file_name)

    ax.set_xticks(x)
    ax.set_xticklabels(names, rotation=rotate_labels, ha='right' if rotate_labels else 'center')
    ax.set_ylabel('% of reads')
    ax.set_ylim(0, max(100.0, float(heights.max()) if heights.size else 0.0))
    ax.legend()
    return ax


def save_match_plot(reports, path, figsize=(8, 5)):
    """Draws `plot_match_percentages` on a new figure and saves it to `path`."""
    fig, ax = plt.subplots(figsize=figsize)
    plot_match_percentages(reports, ax)
    fig.tight_layout()
    fig.savefig(path)
    plt.close(fig)
