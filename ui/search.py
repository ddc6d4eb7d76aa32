from __future__ import annotations

from typing import List, Optional, Sequence

from footprint.factors import MaterialFactor, find_by_id


def option_label(option: MaterialFactor) -> str:
    """Display text for a material option, e.g. ``銅 (Copper) (3.8 kgCO2e/kg)``."""
    return f"{option.name} ({option.factor:g} {option.unit1}/{option.unit2})"


def filter_options(options: Sequence[MaterialFactor], search_term: str) -> List[MaterialFactor]:
    """Options whose label contains ``search_term``, ignoring case."""
    term = (search_term or "").strip().lower()
    if not term:
        return list(options)
    return [opt for opt in options if term in option_label(opt).lower()]


def find_option(options: Sequence[MaterialFactor], option_id: str) -> Optional[MaterialFactor]:
    if not option_id:
        return None
    return find_by_id(options, option_id)
