"""
Integration tests for the REST API.
"""

from tests.helpers.socket_mocks import find_events, last_event


def bearer(token):
    return {'Authorization': f'Bearer {token}'}


class TestApiRoutes:
    """Test the /api blueprint."""

    def test_health(self, http_client):
        """Test the liveness check on an idle server."""
        response = http_client.get('/api/health')

        assert response.status_code == 200
        assert response.get_json() == {'status': 'ok', 'rooms': 0, 'locked_sessions': 0, 'connections': 0}

    def test_health_counts(self, http_client, issue_token, connect_client):
        """Test that the health check reports live rooms and connections."""
        connect_client('bob')
        http_client.post('/api/rooms/r1/join', headers=bearer(issue_token('alice')))
        http_client.post('/api/rooms/r2/join', headers=bearer(issue_token('alice')))

        body = http_client.get('/api/health').get_json()

        assert body['rooms'] == 2
        assert body['locked_sessions'] == 2
        assert body['connections'] == 1

    def test_join_requires_token(self, http_client):
        """Test that joining without a bearer token is rejected."""
        response = http_client.post('/api/rooms/r1/join')

        assert response.status_code == 401
        assert response.get_json()['error']['code'] == 'UNAUTHENTICATED'

    def test_join_with_bad_token(self, http_client):
        """Test that a forged token is rejected."""
        response = http_client.post('/api/rooms/r1/join', headers=bearer('forged'))

        assert response.status_code == 401
        assert response.get_json()['error']['message'] == 'Invalid token'

    def test_join_leave_and_list(self, http_client, issue_token):
        """Test membership through the REST endpoints."""
        http_client.post('/api/rooms/r1/join', headers=bearer(issue_token('alice')))
        response = http_client.post('/api/rooms/r1/join', headers=bearer(issue_token('bob')))

        assert response.status_code == 200
        assert response.get_json()['data']['participants'] == ['alice', 'bob']

        http_client.post('/api/rooms/r1/leave', headers=bearer(issue_token('alice')))
        response = http_client.get('/api/rooms/r1/participants', headers=bearer(issue_token('bob')))

        assert response.get_json() == {
            'success': True,
            'data': {'room_id': 'r1', 'participants': ['bob']},
        }

    def test_participants_require_token(self, http_client):
        """Test that listing participants needs a bearer token."""
        response = http_client.get('/api/rooms/r1/participants')

        assert response.status_code == 401

    def test_participants_require_membership(self, http_client, issue_token, container):
        """Test that only members can list a room, and asking leaves no trace."""
        http_client.post('/api/rooms/r1/join', headers=bearer(issue_token('alice')))
        headers = bearer(issue_token('mallory'))

        member_room = http_client.get('/api/rooms/r1/participants', headers=headers)
        unknown_room = http_client.get('/api/rooms/nowhere/participants', headers=headers)

        assert member_room.status_code == 409
        assert member_room.get_json()['error']['message'] == 'not in room'
        assert unknown_room.status_code == 409
        assert 'nowhere' not in container.get('SessionDirectory').get_all_sessions()

    def test_invalid_room_id(self, http_client, issue_token):
        """Test that malformed room ids are a 400."""
        response = http_client.get('/api/rooms/bad!room/participants', headers=bearer(issue_token('alice')))

        assert response.status_code == 400
        assert response.get_json()['error']['code'] == 'INVALID_ARGUMENT'

    def test_full_room_is_conflict(self, http_client, issue_token, container):
        """Test that joining a full room is a 409."""
        container.get('SessionDirectory').max_players_per_room = 2
        for pid in ('alice', 'bob'):
            http_client.post('/api/rooms/duel/join', headers=bearer(issue_token(pid)))

        response = http_client.post('/api/rooms/duel/join', headers=bearer(issue_token('carol')))

        assert response.status_code == 409
        assert response.get_json()['error']['details'] == {'room_id': 'duel', 'max_players': 2}


class TestGameActionRoute:
    """Test POST /api/game/<room_id>/action."""

    def setup_method(self):
        self.action_url = '/api/game/r1/action'

    def join(self, http_client, issue_token, *participants):
        for pid in participants:
            http_client.post('/api/rooms/r1/join', headers=bearer(issue_token(pid)))

    def test_start_war(self, http_client, issue_token):
        """Test starting War over HTTP."""
        self.join(http_client, issue_token, 'alice', 'bob')

        response = http_client.post(self.action_url, headers=bearer(issue_token('alice')), json={
            'game_type': 'war', 'action': 'start', 'payload': {'players': ['alice', 'bob']},
        })

        assert response.status_code == 200
        body = response.get_json()
        assert body['success'] is True
        assert body['data']['game_type'] == 'war'
        assert body['data']['state']['hand_counts'] == {'alice': 26, 'bob': 26}

    def test_action_requires_token(self, http_client):
        """Test that actions need a bearer token."""
        response = http_client.post(self.action_url, json={'game_type': 'war', 'action': 'state'})

        assert response.status_code == 401

    def test_error_statuses(self, http_client, issue_token):
        """Test the error code to status mapping end to end."""
        self.join(http_client, issue_token, 'alice')
        headers = bearer(issue_token('alice'))

        bad_argument = http_client.post(self.action_url, headers=headers, json={
            'game_type': 'war', 'action': 'start', 'payload': {'players': ['alice']},
        })
        not_found = http_client.post(self.action_url, headers=headers, json={
            'game_type': 'war', 'action': 'play',
        })
        bad_state = http_client.post(self.action_url, headers=headers, json={
            'game_type': 'eratz-ir', 'action': 'finishRound',
        })

        assert bad_argument.status_code == 400
        assert not_found.status_code == 404
        assert bad_state.status_code == 409

    def test_unknown_game_type(self, http_client, issue_token):
        """Test that an unsupported game type is a 400."""
        response = http_client.post(self.action_url, headers=bearer(issue_token('alice')), json={
            'game_type': 'chess', 'action': 'start',
        })

        assert response.status_code == 400
        assert 'Unsupported game type' in response.get_json()['error']['message']

    def test_non_object_body(self, http_client, issue_token):
        """Test that a JSON list body is rejected."""
        response = http_client.post(self.action_url, headers=bearer(issue_token('alice')), json=['war'])

        assert response.status_code == 400

    def test_http_action_is_broadcast(self, http_client, issue_token, connect_client):
        """Test that HTTP commands reach Socket.IO clients in the room."""
        watcher = connect_client('bob')
        watcher.emit('join_room', {'room_id': 'r1'})
        self.join(http_client, issue_token, 'alice')
        watcher.get_received()

        http_client.post(self.action_url, headers=bearer(issue_token('alice')), json={
            'game_type': 'war', 'action': 'start', 'payload': {'players': ['alice', 'bob']},
        })

        update = last_event(watcher.get_received(), 'game_state_update')
        assert update['game_type'] == 'war'
        assert update['state']['players'] == ['alice', 'bob']

    def test_outsider_state_query_is_conflict(self, http_client, issue_token):
        """Test that a state query from outside the room is refused."""
        self.join(http_client, issue_token, 'alice')

        response = http_client.post(self.action_url, headers=bearer(issue_token('mallory')), json={
            'game_type': 'eratz-ir', 'action': 'state',
        })

        assert response.status_code == 409
        assert response.get_json()['error']['message'] == 'not in room'

    def test_read_only_action_is_not_broadcast(self, http_client, issue_token, connect_client):
        """Test that state queries over HTTP stay private."""
        watcher = connect_client('bob')
        watcher.emit('join_room', {'room_id': 'r1'})
        self.join(http_client, issue_token, 'alice')
        watcher.get_received()

        response = http_client.post(self.action_url, headers=bearer(issue_token('alice')), json={
            'game_type': 'eratz-ir', 'action': 'state',
        })

        assert response.status_code == 200
        assert response.get_json()['data']['state']['participants'] == ['bob', 'alice']
        assert find_events(watcher.get_received(), 'game_state_update') == []
