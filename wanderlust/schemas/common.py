from decimal import Decimal
from typing import Annotated

from pydantic import PlainSerializer

from wanderlust.core.utils import qround

# Money leaves the API as a string with exactly two decimal places.
Money = Annotated[Decimal, PlainSerializer(lambda v: str(qround(v)), return_type=str)]
