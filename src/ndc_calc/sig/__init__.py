"""SIG interpretation: rule tables, normalizers and the interpreter."""

from __future__ import annotations

from ndc_calc.sig.interpreter import SigInterpreter, parse_sig
from ndc_calc.sig.normalizers import normalize_sig_text, resolve_frequency, resolve_unit
from ndc_calc.sig.patterns import SIG_RULES, SigRule

__all__ = [
    "SIG_RULES",
    "SigInterpreter",
    "SigRule",
    "normalize_sig_text",
    "parse_sig",
    "resolve_frequency",
    "resolve_unit",
]
