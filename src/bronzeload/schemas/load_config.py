"""
Pandera schema for table-defined load registries.

A registry kept as a CSV table has one row per load entry. The schema
checks the table before entries are built from it.
"""

import pandera.pandas as pa
from pandera.typing import Series


class LoadConfigSchema(pa.DataFrameModel):
    """
    Schema for a load registry table.

    Boolean columns must already be parsed to bool; only load_order is
    coerced from text.
    """

    load_order: Series[int] = pa.Field(
        coerce=True,
        description="Processing sequence (ascending)",
    )
    destination_schema: Series[str] = pa.Field(
        str_length={"min_value": 1},
        description="Target schema",
    )
    destination_table: Series[str] = pa.Field(
        str_length={"min_value": 1},
        description="Target table",
    )
    source_group: Series[str] = pa.Field(
        str_length={"min_value": 1},
        description="Source system subdirectory",
    )
    file_name: Series[str] = pa.Field(
        str_length={"min_value": 1},
        description="Source file name",
    )
    has_header: Series[bool] = pa.Field(description="Skip the first record")
    field_delimiter: Series[str] = pa.Field(
        str_length={"min_value": 1, "max_value": 1},
        description="Single-character field separator",
    )
    is_active: Series[bool] = pa.Field(description="Whether the entry is loaded")

    class Config:
        """Schema configuration."""

        name = "LoadConfigSchema"
        strict = False  # Allow comment/notes columns
        coerce = False
