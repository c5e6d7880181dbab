from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class LivePosition(BaseModel):
    """
    One open position as reported by the live-market feed.
    Numeric fields stay as the raw decimal strings the exchange sends.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    market_id: int
    side: str
    size: str | None = None
    entry_price: str | None = Field(default=None, validation_alias=AliasChoices("entry_price", "avg_entry_price"))
    mark_price: str | None = None
    position_value: str | None = None
    liquidation_price: str | None = None
    margin: str | None = Field(default=None, validation_alias=AliasChoices("margin", "allocated_margin"))
    leverage: str | None = None
    funding: str | None = None
    unrealized_pnl: str | None = None

    @field_validator(
        "size",
        "entry_price",
        "mark_price",
        "position_value",
        "liquidation_price",
        "margin",
        "leverage",
        "funding",
        "unrealized_pnl",
        mode="before",
    )
    @classmethod
    def _numbers_as_text(cls, v):
        if v is None:
            return None
        return str(v)
