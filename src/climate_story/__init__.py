"""
climate_story: interactive climate storytelling panels (lines, scatter,
warming stripes + choropleth, sea-ice playback) built as plotly figures.
"""

from .data import DataLoadError, Region, Sample, load_geometry, load_samples, read_table
from .nearest import nearest_index, nearest_sample
from .tooltip import CrosshairSync, Tooltip
from .selection import SeriesVisibilityController
from .steps import ScrollStepMachine, Step
from .playback import IntervalScheduler, PlaybackAnimator, PlaybackFrame
from .choropleth import ChoroplethUpdater

__all__ = [
    "DataLoadError",
    "Region",
    "Sample",
    "load_geometry",
    "load_samples",
    "read_table",
    "nearest_index",
    "nearest_sample",
    "CrosshairSync",
    "Tooltip",
    "SeriesVisibilityController",
    "ScrollStepMachine",
    "Step",
    "IntervalScheduler",
    "PlaybackAnimator",
    "PlaybackFrame",
    "ChoroplethUpdater",
]
__version__ = "0.1.0"
