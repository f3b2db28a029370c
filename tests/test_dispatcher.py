import pytest

from mouse_click_effects.config import ClickEffectsConfig
from mouse_click_effects.dispatcher import ClickDispatcher, ClickEvent, ListenerState
from mouse_click_effects.icon_cache import ClickType

from conftest import FakeListener


@pytest.fixture
def setup():
    config = ClickEffectsConfig(
        left_click_color='#ff0000',
        middle_click_color='#00ff00',
        right_click_color='#0000ff',
    )
    clicks = []
    activations = []
    listeners = []

    def listener_factory(callback):
        listeners.append(FakeListener(callback))
        return listeners[-1]

    dispatcher = ClickDispatcher(
        config,
        listener_factory,
        lambda click_type, color: clicks.append((click_type, color)),
        lambda: activations.append(True),
    )
    return dispatcher, config, listeners[0], clicks, activations


def test_starts_inactive(setup):
    dispatcher, config, listener, clicks, activations = setup

    assert dispatcher.state == ListenerState.INACTIVE
    assert not listener.registered


def test_activation_resets_listener_and_refreshes_icons(setup):
    dispatcher, config, listener, clicks, activations = setup

    dispatcher.set_active(True)
    dispatcher.set_active(True)

    assert dispatcher.state == ListenerState.ACTIVE
    assert listener.registered
    assert listener.deregister_calls == 2
    assert listener.register_calls == 2
    assert len(activations) == 2


def test_deactivation_only_deregisters(setup):
    dispatcher, config, listener, clicks, activations = setup
    dispatcher.set_active(True)

    dispatcher.set_active(False)

    assert dispatcher.state == ListenerState.INACTIVE
    assert not listener.registered
    assert len(activations) == 1


@pytest.mark.parametrize('button, expected', [
    (1, (ClickType.LEFT, '#ff0000')),
    (2, (ClickType.MIDDLE, '#00ff00')),
    (3, (ClickType.RIGHT, '#0000ff')),
])
def test_buttons_map_to_click_types(setup, button, expected):
    dispatcher, config, listener, clicks, activations = setup
    dispatcher.set_active(True)

    listener.emit(ClickEvent(button=button))

    assert clicks == [expected]


def test_unknown_buttons_and_releases_are_ignored(setup):
    dispatcher, config, listener, clicks, activations = setup
    dispatcher.set_active(True)

    listener.emit(ClickEvent(button=0))
    listener.emit(ClickEvent(button=8))
    listener.emit(ClickEvent(button=1, pressed=False))

    assert clicks == []


def test_disabled_button_is_not_forwarded(setup):
    dispatcher, config, listener, clicks, activations = setup
    dispatcher.set_active(True)
    config.middle_click_effect_enabled = False

    listener.emit(ClickEvent(button=2))
    listener.emit(ClickEvent(button=3))

    assert clicks == [(ClickType.RIGHT, '#0000ff')]


def test_inactive_dispatcher_drops_events(setup):
    dispatcher, config, listener, clicks, activations = setup
    dispatcher.set_active(True)
    dispatcher.set_active(False)

    # Even if an event slips through, nothing is forwarded
    dispatcher.handle_event(ClickEvent(button=1))

    assert clicks == []


def test_color_is_read_at_click_time(setup):
    dispatcher, config, listener, clicks, activations = setup
    dispatcher.set_active(True)
    config.left_click_color = '#123456'

    listener.emit(ClickEvent(button=1))

    assert clicks == [(ClickType.LEFT, '#123456')]


def test_event_type_tag():
    assert ClickEvent(button=1).type == 'mouse:button:1p'
    assert ClickEvent(button=3, pressed=False).type == 'mouse:button:3r'
