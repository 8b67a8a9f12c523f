"""Country list offered in the billing address form."""

from functools import lru_cache
from typing import Dict

import pycountry


@lru_cache()
def all_countries() -> Dict[str, str]:
    """ISO 3166 alpha-2 code -> country name, ordered by name."""
    countries = sorted(pycountry.countries, key=lambda c: c.name)
    return {country.alpha_2: country.name for country in countries}
