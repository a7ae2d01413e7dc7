import logging

from grain.core.resources import OwnedResource
from .filters import LumberFilter, FinishFilter, SheetGoodFilter, ConsumableFilter, ToolFilter
from .models import Lumber, Finish, SheetGood, Consumable, Tool
from .serializers import LumberSerializer, FinishSerializer, SheetGoodSerializer, ConsumableSerializer, ToolSerializer

logger = logging.getLogger('grain.inventory')


lumber = OwnedResource(
    Lumber, LumberSerializer, label='Lumber', basename='lumber',
    filterset_class=LumberFilter, logger=logger,
)

finishes = OwnedResource(
    Finish, FinishSerializer, label='Finish', basename='finish',
    filterset_class=FinishFilter, logger=logger,
)

sheet_goods = OwnedResource(
    SheetGood, SheetGoodSerializer, label='Sheet good', basename='sheet-good',
    filterset_class=SheetGoodFilter, logger=logger,
)

consumables = OwnedResource(
    Consumable, ConsumableSerializer, label='Consumable', basename='consumable',
    filterset_class=ConsumableFilter, logger=logger,
)

tools = OwnedResource(
    Tool, ToolSerializer, label='Tool', basename='tool',
    filterset_class=ToolFilter, logger=logger,
)
