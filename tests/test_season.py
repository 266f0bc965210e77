from seasonplan import Actor, Rejection, SeasonStatus, SeasonStatusController, StatusTransition

ADMIN = Actor(name="ada", role="admin")
USER = Actor(name="sam", role="user", department="Sourcing")


def test_only_open_season_allows_task_edits(make_season):
    assert SeasonStatusController(make_season()).allows_task_edits
    for status in (SeasonStatus.ON_HOLD, SeasonStatus.CLOSED, SeasonStatus.CANCELED):
        assert not SeasonStatusController(make_season(status=status)).allows_task_edits


def test_any_transition_between_states(make_season):
    controller = SeasonStatusController(make_season(status=SeasonStatus.CANCELED))

    result = controller.request_transition(ADMIN, "Open")

    assert isinstance(result, StatusTransition)
    assert result.from_status == SeasonStatus.CANCELED
    assert result.to_status == SeasonStatus.OPEN
    assert controller.confirmed == SeasonStatus.CANCELED


def test_transition_to_current_status_is_noop(make_season):
    controller = SeasonStatusController(make_season())

    result = controller.request_transition(ADMIN, SeasonStatus.OPEN)

    assert isinstance(result, Rejection)
    assert result.code == "StatusUnchanged"


def test_regular_users_cannot_change_status(make_season):
    controller = SeasonStatusController(make_season())

    result = controller.request_transition(USER, SeasonStatus.CLOSED)

    assert result.code == "NotPrivileged"
    assert controller.selected == SeasonStatus.OPEN


def test_selection_reverts_to_confirmed(make_season):
    controller = SeasonStatusController(make_season())
    controller.select("On-Hold")

    controller.revert()

    assert controller.selected == SeasonStatus.OPEN


def test_confirm_adopts_server_season(make_season):
    controller = SeasonStatusController(make_season())
    controller.select(SeasonStatus.CLOSED)

    controller.confirm(make_season(status=SeasonStatus.CLOSED))

    assert controller.confirmed == SeasonStatus.CLOSED
    assert controller.selected == SeasonStatus.CLOSED
    assert not controller.allows_task_edits


def test_request_uses_selected_status_by_default(make_season):
    controller = SeasonStatusController(make_season())
    controller.select(SeasonStatus.ON_HOLD)

    result = controller.request_transition(ADMIN)

    assert result.to_status == SeasonStatus.ON_HOLD
