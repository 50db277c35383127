from .base import Panel
from .co2_lines import Co2LinesPanel
from .country_lines import CountryLinesPanel
from .scatter import ScatterPanel
from .scenario_story import ScenarioStoryPanel
from .sea_ice import SeaIcePanel
from .stripes_map import StripesMapPanel

__all__ = [
    "Panel",
    "Co2LinesPanel",
    "CountryLinesPanel",
    "ScatterPanel",
    "ScenarioStoryPanel",
    "SeaIcePanel",
    "StripesMapPanel",
]
