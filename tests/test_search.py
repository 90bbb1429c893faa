"""Tests for location search."""

from floormap.search import LocationSearch, filter_locations


def test_filter_by_name(make_location):
    """Test case-insensitive substring match on the name."""
    ivanov = make_location("1", name="Ivanov")
    petrov = make_location("2", name="Petrov")

    assert filter_locations([ivanov, petrov], "iva") == [ivanov]
    assert filter_locations([ivanov, petrov], "OV") == [ivanov, petrov]
    assert filter_locations([ivanov, petrov], "sidorov") == []


def test_blank_query_returns_everything(make_location):
    """Test that an empty query does not filter."""
    locations = [make_location("1", name="Ivanov"), make_location("2", name="Petrov")]

    assert filter_locations(locations, "") == locations
    assert filter_locations(locations, "   ") == locations
    assert filter_locations(locations, None) == locations


def test_filter_by_department(make_location):
    """Test matching on the department stored in custom fields."""
    finance = make_location("1", name="Desk 1", custom_fields={"department": "Finance"})
    it = make_location("2", name="Desk 2", custom_fields={"department": "IT"})
    broken = make_location("3", name="Desk 3", custom_fields="garbage")

    assert filter_locations([finance, it, broken], "fin") == [finance]


def test_notifies_only_on_change(make_location):
    """Test that the host is told about the filtered set once per change."""
    calls = []
    locations = [make_location("1", name="Ivanov"), make_location("2", name="Petrov")]
    search = LocationSearch(locations, on_filtered=calls.append)

    assert len(calls) == 1
    assert [loc.id for loc in calls[0]] == ["1", "2"]

    search.set_query("v")
    assert len(calls) == 1

    search.set_query("iv")
    assert [loc.id for loc in calls[-1]] == ["1"]
    search.set_query("iva")
    assert len(calls) == 2

    search.close()
    assert [loc.id for loc in calls[-1]] == ["1", "2"]
    assert search.query == ""
    assert search.is_open is False


def test_closed_search_shows_everything(make_location):
    """Test that closing the search box restores the full set."""
    search = LocationSearch([make_location("1", name="Ivanov"), make_location("2", name="Petrov")])
    search.set_query("pet")
    assert [loc.id for loc in search.results] == ["2"]

    search.close()
    assert len(search.results) == 2


def test_set_locations_reapplies_query(make_location):
    """Test that switching floors keeps the query applied."""
    calls = []
    search = LocationSearch([make_location("1", name="Ivanov")], on_filtered=calls.append)
    search.set_query("pet")

    search.set_locations([make_location("2", name="Petrov"), make_location("3", name="Sidorov")])

    assert [loc.id for loc in calls[-1]] == ["2"]


def test_suggestions(make_location):
    """Test the suggestion list under the search box."""
    locations = [make_location(str(i), name=f"Desk {i}") for i in range(8)]
    search = LocationSearch(locations)

    assert search.suggestions() == []
    search.set_query("desk")
    assert [loc.id for loc in search.suggestions()] == ["0", "1", "2", "3", "4"]
    assert len(search.suggestions(limit=2)) == 2


def test_find(make_location):
    """Test selecting a location from the search box."""
    found = []
    search = LocationSearch(
        [make_location("1", name="Ivanov"), make_location("2", name="Petrov")],
        on_find=found.append,
    )

    assert search.find() is None
    search.set_query("petr")
    assert search.find() == "2"
    assert search.find("1") == "1"
    assert found == ["2", "1"]

    search.set_query("nobody")
    assert search.find() is None
    assert found == ["2", "1"]
