import pytest
import pandas as pd
import geopandas as gpd

from marine_sdm.exceptions import FormatError, ValidationError
from marine_sdm.occurrence import load_records, build_points


def test_load_records_keeps_columns_and_rows(records_path, records):
    loaded = load_records(records_path)

    assert list(loaded.columns) == list(records.columns)
    assert loaded["site"].tolist() == ["a", "b", "c"]
    assert loaded["PA"].tolist() == [1, 0, 1]
    assert pd.api.types.is_numeric_dtype(loaded["lon"])
    assert not pd.api.types.is_numeric_dtype(loaded["site"])


def test_load_records_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_records(tmp_path / "nope.csv")


def test_load_records_missing_label_column(tmp_path, records):
    path = tmp_path / "no_pa.csv"
    records.drop(columns="PA").to_csv(path, index=False)

    with pytest.raises(FormatError) as excinfo:
        load_records(path)

    assert excinfo.value.missing_columns == ["PA"]
    assert excinfo.value.path == path


def test_load_records_empty_file(tmp_path):
    path = tmp_path / "empty.csv"
    path.write_text("")

    with pytest.raises(FormatError):
        load_records(path)


def test_load_records_not_text(tmp_path):
    path = tmp_path / "binary.csv"
    path.write_bytes(b"PA,lon,lat\n\xff\xfe\x00\x81,\x9d,\x8f\n")

    with pytest.raises(FormatError):
        load_records(path)


def test_load_records_ragged_row(tmp_path):
    path = tmp_path / "ragged.csv"
    path.write_text("PA,lon,lat\n1,0.5,53.5\n0,1.5,52.5,9,9\n")

    with pytest.raises(FormatError):
        load_records(path)


def test_load_records_duplicate_header(tmp_path):
    path = tmp_path / "duplicate.csv"
    path.write_text("PA,lon,lat,tag,tag\n1,0.5,53.5,x,y\n")

    with pytest.raises(FormatError) as excinfo:
        load_records(path)

    assert "['tag']" in str(excinfo.value)


def test_load_records_integer_column_with_gaps(tmp_path):
    """A blank cell does not turn an integer column into floats."""
    path = tmp_path / "gaps.csv"
    path.write_text("PA,lon,lat,station,note\n1,0.5,53.5,7,\n0,1.5,52.5,,calm\n")

    loaded = load_records(path)

    assert pd.api.types.is_integer_dtype(loaded["station"])
    assert loaded.loc[0, "station"] == 7
    assert loaded["station"].isna().tolist() == [False, True]
    assert loaded["note"].isna().tolist() == [True, False]


def test_load_records_custom_columns(tmp_path):
    path = tmp_path / "records.tsv"
    path.write_text("presence\tlongitude\tlatitude\n1\t1.5\t52.5\n")

    loaded = load_records(path, label_column="presence", coordinate_columns=("longitude", "latitude"), sep="\t")

    assert list(loaded.columns) == ["presence", "longitude", "latitude"]


def test_build_points_order_and_crs(records):
    points = build_points(records)

    assert isinstance(points, gpd.GeoDataFrame)
    assert len(points) == len(records)
    assert points.crs == "EPSG:4326"
    assert points.geometry.x.tolist() == records["lon"].tolist()
    assert points.geometry.y.tolist() == records["lat"].tolist()
    assert list(points.index) == [0, 1, 2]


def test_build_points_does_not_modify_records(records):
    before = records.copy()
    build_points(records)
    pd.testing.assert_frame_equal(records, before)


@pytest.mark.parametrize(
    "column, value, row",
    [
        ("lat", 95.0, 1),
        ("lon", -181.0, 2),
        ("lat", None, 0),
    ],
)
def test_build_points_rejects_bad_coordinates(records, column, value, row):
    records.loc[row, column] = value

    with pytest.raises(ValidationError) as excinfo:
        build_points(records)

    assert excinfo.value.row == row
    assert excinfo.value.column == column


def test_build_points_rejects_non_numeric_coordinates(records):
    records["lon"] = records["lon"].astype(object)
    records.loc[1, "lon"] = "east"

    with pytest.raises(ValidationError) as excinfo:
        build_points(records)

    assert excinfo.value.row == 1


def test_build_points_rejects_non_binary_label(records):
    records.loc[2, "PA"] = 2

    with pytest.raises(ValidationError) as excinfo:
        build_points(records)

    assert excinfo.value.row == 2
    assert excinfo.value.column == "PA"


def test_build_points_label_check_can_be_skipped(records):
    records.loc[2, "PA"] = 2

    points = build_points(records, label_column=None)

    assert len(points) == 3


def test_build_points_accepts_coordinate_range_ends():
    records = pd.DataFrame({"PA": [1, 0, 1, 0], "lon": [-180.0, 180.0, 0.0, 0.0], "lat": [0.0, 0.0, -90.0, 90.0]})

    points = build_points(records)

    assert points.geometry.x.tolist() == [-180.0, 180.0, 0.0, 0.0]
    assert points.geometry.y.tolist() == [0.0, 0.0, -90.0, 90.0]
