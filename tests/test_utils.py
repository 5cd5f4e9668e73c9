from datetime import datetime, timezone

import polars as pl
import pytest

from pipeline.schema_to_timescale import SchemaOptions, plan_schema
from pipeline.utils import align_frame


def test_align_frame_orders_and_casts(cpu_header) -> None:
    schema = plan_schema(cpu_header, SchemaOptions(in_table_tag=False)).polars_schema("cpu")
    df = pl.DataFrame(
        {
            "usage_system": ["2.5", "NA"],
            "extra": [1, 2],
            "tags_id": [1, 2],
            "time": [datetime(2016, 1, 1, tzinfo=timezone.utc)] * 2,
            "usage_user": [1, 3],
        }
    )

    out = align_frame(df, schema)

    assert out.columns == ["time", "tags_id", "usage_user", "usage_system"]
    assert out.schema["tags_id"] == pl.Int32
    assert out["usage_user"].to_list() == [1.0, 3.0]
    assert out["usage_system"].to_list() == [2.5, None]


def test_align_frame_keeps_na_in_text_columns(cpu_header) -> None:
    schema = plan_schema(cpu_header).polars_schema("tags")
    out = align_frame(pl.DataFrame({"hostname": ["host_0"], "region": ["NA"]}), schema)
    assert out["region"].to_list() == ["NA"]


def test_align_frame_reports_missing_columns(cpu_header) -> None:
    schema = plan_schema(cpu_header).polars_schema("tags")
    with pytest.raises(ValueError, match="missing column\\(s\\) region"):
        align_frame(pl.DataFrame({"hostname": ["host_0"]}), schema)
