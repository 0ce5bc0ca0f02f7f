from timesheet.services.auth_events import AuthChange, AuthEvent, AuthEventBus


def test_subscribers_receive_events_until_unsubscribed():
    bus = AuthEventBus()
    seen = []
    sub = bus.subscribe(seen.append)

    bus.publish(AuthChange(event=AuthEvent.SIGNED_IN, user_id=1, email="a@example.com"))
    sub.unsubscribe()
    bus.publish(AuthChange(event=AuthEvent.SIGNED_OUT, user_id=1))

    assert [change.event for change in seen] == [AuthEvent.SIGNED_IN]
    assert sub.active is False


def test_failing_listener_does_not_block_others():
    bus = AuthEventBus()
    seen = []

    def broken(_change):
        raise RuntimeError("boom")

    bus.subscribe(broken)
    bus.subscribe(seen.append)
    bus.publish(AuthChange(event=AuthEvent.TOKEN_REFRESHED, user_id=3, scheme="jwt"))

    assert len(seen) == 1
    assert seen[0].scheme == "jwt"
