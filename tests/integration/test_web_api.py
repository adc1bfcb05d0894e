"""
Integration tests for the dicebag HTTP API.
"""

import pytest

from dicebag import __version__
from dicebag.core.config import Config
from dicebag.engine import DiceRoller, RollService
from dicebag.engine.random_source import ScriptedRandomSource
from dicebag.web.server import create_app


def make_client(faces=(), **roller_options):
    roller = DiceRoller(source=ScriptedRandomSource(faces), **roller_options)
    app = create_app(config=Config(), service=RollService(roller))
    app.config['TESTING'] = True
    return app.test_client()


@pytest.fixture
def client():
    return make_client()


class TestRollEndpoint:
    """Test POST /api/roll."""

    def test_roll(self):
        """Test a roll returns total, annotation and breakdown."""
        client = make_client([7, 15])
        response = client.post('/api/roll', json={'command': '2d20b + 5 ! attack', 'style': 'plain'})
        assert response.status_code == 200
        data = response.get_json()
        assert data['success'] is True
        assert data['result']['total'] == 20.0
        assert data['result']['annotation'] == 'attack'
        assert data['result']['breakdown'] == "2d20b1: [(7), 15] = 15 | Total: 20"

    def test_default_style(self):
        """Test the roller's style is used when none is sent."""
        client = make_client([4])
        data = client.post('/api/roll', json={'command': 'd6'}).get_json()
        assert data['result']['breakdown'] == "1d6: [4] = 4 | **Total: 4**"

    def test_dice_error(self, client):
        """Test a rejected command is a 400 with its error code."""
        response = client.post('/api/roll', json={'command': '5 / 0'})
        assert response.status_code == 400
        data = response.get_json()
        assert data['success'] is False
        assert data['error_code'] == 'division_by_zero'

    def test_huge_dice_size(self, client):
        """Test a die too large to total is a 400, not a server error."""
        response = client.post('/api/roll', json={'command': 'd' + '9' * 400})
        assert response.status_code == 400
        assert response.get_json()['error_code'] == 'malformed_dice_spec'

    def test_missing_command(self, client):
        """Test a request without a command fails validation."""
        response = client.post('/api/roll', json={'style': 'plain'})
        assert response.status_code == 400
        assert response.get_json()['error_code'] == 'schema_validation_failed'

    def test_unknown_style(self, client):
        """Test an unknown style fails validation."""
        response = client.post('/api/roll', json={'command': 'd6', 'style': 'latex'})
        assert response.get_json()['error_code'] == 'schema_validation_failed'

    def test_body_not_json(self, client):
        """Test a non-JSON body is bad input."""
        response = client.post('/api/roll', data='2 + 2', content_type='text/plain')
        assert response.status_code == 400
        assert response.get_json()['error_code'] == 'invalid_input'


class TestOtherEndpoints:
    """Test batch, rpn, dice jail and health."""

    def test_batch_roll(self):
        """Test a batch returns every total in order."""
        client = make_client([1, 2, 3])
        response = client.post('/api/batch_roll', json={'command': 'd6', 'count': 3})
        data = response.get_json()
        assert data['success'] is True
        assert data['result']['totals'] == [1.0, 2.0, 3.0]

    def test_batch_count_below_two(self, client):
        """Test a batch of one fails validation."""
        response = client.post('/api/batch_roll', json={'command': 'd6', 'count': 1})
        assert response.status_code == 400
        assert response.get_json()['error_code'] == 'schema_validation_failed'

    def test_batch_count_above_limit(self):
        """Test a batch past the roller's limit is rejected."""
        client = make_client(max_batch_count=5)
        response = client.post('/api/batch_roll', json={'command': 'd6', 'count': 6})
        assert response.get_json()['error_code'] == 'invalid_batch_count'

    @pytest.mark.parametrize("count", [2.0, 3.0])
    def test_batch_count_float(self, client, count):
        """Test a whole-valued float count is a 400, not a server error."""
        response = client.post('/api/batch_roll', json={'command': 'd6', 'count': count})
        assert response.status_code == 400
        assert response.get_json()['error_code'] == 'invalid_batch_count'

    def test_rpn(self, client):
        """Test the postfix form of an expression."""
        response = client.post('/api/rpn', json={'command': '2 ^ 3 ^ 2'})
        assert response.get_json()['rpn'] == ['2', '3', '2', '^', '^']

    def test_rpn_error(self, client):
        """Test a bad expression is reported with its code."""
        response = client.post('/api/rpn', json={'command': '(1 + 2'})
        assert response.get_json()['error_code'] == 'unbalanced_parens'

    def test_new_dice(self, client):
        """Test new dice come back with a sample roll."""
        data = client.post('/api/new_dice').get_json()
        assert data['success'] is True
        assert len(data['sample']['faces']) == 5
        assert data['breakdown'].startswith("5d20: [")

    def test_health(self, client):
        """Test the health check reports the version."""
        data = client.get('/api/health').get_json()
        assert data == {'status': 'ok', 'version': __version__}
