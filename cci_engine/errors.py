"""
Error Taxonomy for the CCI Financial Rules Engine

Every failure raised by the engine is a named, distinguishable exception.
Domain errors subclass ValueError so callers that already treat ValueError
as "bad input" keep working; each also carries a stable ``code`` for
API responses.
"""


class CciEngineError(ValueError):
    """Base class for all domain errors raised by the engine."""

    code = "cci_engine_error"


class NoActiveSettingError(CciEngineError):
    """No CCI setting version covers the requested date."""

    code = "no_active_setting"

    def __init__(self, on_date):
        self.on_date = on_date
        super().__init__(f"No active CCI setting covers {on_date}")


class InvalidBuyerClassError(CciEngineError):
    """Unknown buyer class key for the EMD percentage map."""

    code = "invalid_buyer_class"

    def __init__(self, value):
        self.value = value
        super().__init__(
            f"Invalid buyer class: {value!r}. Must be 'kvic', 'privateMill' or 'trader'"
        )


class DivisionByZeroError(CciEngineError):
    """A ratio was requested over zero bales, quintals or another zero quantity."""

    code = "division_by_zero"


class NegativeInputError(CciEngineError):
    """A weight, bale count, percent, day count or moisture reading was negative."""

    code = "negative_input"


class UnitMismatchError(TypeError):
    """Arithmetic was attempted between two different unit types."""

    code = "unit_mismatch"
