import os
from collections.abc import Sequence
from typing import TypeAlias, cast

import matplotlib.pyplot as plt
from matplotlib.axes import Axes
from matplotlib.figure import Figure

want_transparent = os.getenv("QNLS_PLTTRANSPARENT", "1") != "0"
"""
Whether to save figures as transparent image.
Change to opaque image with QNLS_PLTTRANSPARENT=0 environment variable.
"""

want_show = os.getenv("QNLS_PLTSHOW", "1") != "0"
"""
Whether to display the plot on GUI systems.
Disable the display window with QNLS_PLTSHOW=0 environment variable.
"""

Axes1D: TypeAlias = Sequence[Axes]
"""
1-dimensional array of Axes.
"""


def plt_save(*save_to: str | tuple[Figure, str], **kwargs) -> None:
    """
    Save figures to files if requested, then display them.

    Args:
        save_to: Output filename for the current figure, or pairs of figure and output filename.
                 Empty filename skips saving.
    """
    for item in save_to:
        fig, filename = (plt, item) if isinstance(item, str) else item
        if filename:
            cast(Figure, fig).savefig(filename, dpi=300, transparent=want_transparent, **kwargs)

    if want_show:
        plt.show()


__all__ = [
    "Axes",
    "Axes1D",
    "Figure",
    "plt_save",
    "plt",
]
