"""List view state: sorting, paging, filters and the single edited cell."""

import pytest

from timesheet.services.listview import EditingCell, ListViewState, plan_cell_commit


def test_defaults_from_empty_query_string():
    state = ListViewState.from_params({})
    assert (state.page, state.sort, state.order) == (1, "start_time", "desc")
    assert state.project_id is None
    assert state.url() == "/timesheet"


def test_unknown_sort_column_falls_back_to_default():
    state = ListViewState.from_params({"sort": "user_id", "order": "sideways"})
    assert state.sort == "start_time"
    assert state.order == "desc"


def test_toggle_sort_flips_active_column_and_starts_new_column_ascending():
    state = ListViewState()
    flipped = state.toggle_sort("start_time")
    assert (flipped.sort, flipped.order) == ("start_time", "asc")
    assert flipped.toggle_sort("start_time").order == "desc"

    other = flipped.toggle_sort("duration")
    assert (other.sort, other.order) == ("duration", "asc")


def test_toggle_sort_resets_page():
    state = ListViewState(page=4)
    assert state.toggle_sort("description").page == 1


def test_toggle_sort_rejects_unknown_column():
    with pytest.raises(ValueError):
        ListViewState().toggle_sort("password_hash")


def test_page_clamps_into_range():
    assert ListViewState(page=9).clamp(3).page == 3
    assert ListViewState(page=2).clamp(0).page == 1
    assert ListViewState().go_to(0, 5).page == 1


def test_next_on_last_page_and_previous_on_first_page_are_noops():
    last = ListViewState(page=3)
    assert last.next_page(3) is last
    first = ListViewState(page=1)
    assert first.previous_page(3) is first
    assert ListViewState(page=2).next_page(3).page == 3


def test_search_and_project_filter_reset_page():
    state = ListViewState(page=5)
    assert state.with_search("  acme ").search == "acme"
    assert state.with_search("acme").page == 1
    assert state.with_project("4").project_id == 4
    assert state.with_project("all").project_id is None
    assert state.with_project("4").page == 1


def test_project_sentinel_all_clears_filter():
    assert ListViewState.from_params({"project": "all"}).project_id is None
    assert ListViewState.from_params({"project": "12"}).project_id == 12


def test_round_trip_through_url_params():
    state = ListViewState(page=2, search="inv", sort="duration", order="asc", project_id=3)
    params = state.to_params()
    assert params == {"q": "inv", "project": "3", "sort": "duration", "order": "asc", "page": "2"}
    assert ListViewState.from_params(params) == state


def test_only_one_cell_is_edited_at_a_time():
    state = ListViewState().begin_edit(5, "description")
    assert state.is_editing(5, "description")

    switched = state.begin_edit(6, "invoice_number")
    assert switched.is_editing(6, "invoice_number")
    assert not switched.is_editing(5, "description")
    assert switched.to_params()["edit"] == "6:invoice_number"
    assert switched.end_edit().editing is None


def test_non_editable_cells_are_refused():
    with pytest.raises(ValueError):
        ListViewState().begin_edit(1, "duration")
    assert EditingCell.parse("1:start_time") is None
    assert EditingCell.parse("abc:description") is None


def test_project_commit_clears_task_in_same_update():
    commit = plan_cell_commit(EditingCell(3, "project_id"), "8", original="2")
    assert commit.entry_id == 3
    assert commit.payload == {"project_id": "8", "task_id": None}


def test_unchanged_buffer_issues_no_write():
    assert plan_cell_commit(EditingCell(3, "description"), "same ", original="same") is None


def test_text_commit_is_single_field():
    commit = plan_cell_commit(EditingCell(3, "invoice_number"), "INV-9", original="")
    assert commit.payload == {"invoice_number": "INV-9"}
