"""
Common SocketIO mock patterns and client helpers for testing.
"""

from unittest.mock import Mock


def create_mock_socketio():
    """Create a standardized mock SocketIO object for testing.

    Returns:
        Mock: A configured mock SocketIO object with common methods
    """
    mock_socketio = Mock()
    mock_socketio.emit = Mock()
    mock_socketio.server = Mock()
    mock_socketio.server.enter_room = Mock()
    mock_socketio.server.leave_room = Mock()
    return mock_socketio


def emitted_events(mock_socketio, event_name):
    """Payloads of every ``emit(event_name, ...)`` call on a mock SocketIO."""
    return [c.args[1] for c in mock_socketio.emit.call_args_list if c.args[0] == event_name]


def find_events(received, event_name):
    """Args of every received event with the given name, from a SocketIOTestClient."""
    return [event['args'][0] for event in received if event['name'] == event_name]


def last_event(received, event_name):
    events = find_events(received, event_name)
    assert events, f"Expected a '{event_name}' event, got {[e['name'] for e in received]}"
    return events[-1]
