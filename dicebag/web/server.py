"""
HTTP API for dicebag.

Small Flask app exposing the roll service as JSON endpoints:
- POST /api/roll:        roll a command
- POST /api/batch_roll:  roll a command several times
- POST /api/rpn:         show the postfix form of an expression
- POST /api/new_dice:    put the dice in dice jail
- GET  /api/health:      liveness check
"""

import logging
from typing import Any, Dict, Optional

import jsonschema
from flask import Flask, jsonify, request

from dicebag import __version__
from dicebag.core.config import Config, get_config
from dicebag.core.result import ErrorCode, Result
from dicebag.engine import RollService
from dicebag.engine.formatter import format_record, record_to_dict
from dicebag.engine.schemas import (
    batch_roll_request_schema,
    roll_request_schema,
    rpn_request_schema,
    validate_request,
)

logger = logging.getLogger(__name__)


def _error_response(result: Result, status: int = 400):
    return jsonify(result.error_dict()), status


def create_app(config: Optional[Config] = None, service: Optional[RollService] = None) -> Flask:
    """
    Create the Flask app.

    Args:
        config: Configuration (defaults to the global config)
        service: Roll service to serve (defaults to one built from config)

    Returns:
        Flask app
    """
    config = config or get_config()

    app = Flask(__name__)
    app.config['DEBUG'] = config.debug
    app.roll_service = service or RollService.from_config(config)

    def read_json(schema: Dict[str, Any]):
        """Parse and validate the request body; return (data, error_response)."""
        data = request.get_json(silent=True)
        if data is None:
            return None, _error_response(
                Result.fail('Request body must be a JSON object', ErrorCode.INVALID_INPUT)
            )
        try:
            validate_request(data, schema)
        except jsonschema.ValidationError as e:
            logger.warning(f"Invalid request to {request.path}: {e.message}")
            return None, _error_response(
                Result.fail(e.message, ErrorCode.SCHEMA_VALIDATION_FAILED)
            )
        return data, None

    @app.route('/api/health')
    def api_health():
        return jsonify({'status': 'ok', 'version': __version__})

    @app.route('/api/roll', methods=['POST'])
    def api_roll():
        """
        JSON API: Roll a command.

        Request JSON:
            {
                "command": "4d6b3 + 2 ! strength",
                "style": "plain"  # optional
            }

        Returns:
            {
                "success": true,
                "result": {
                    "total": 17.0,
                    "total_display": "17",
                    "breakdown": "4d6b3: [(1), 5, 4, 6] = 15 | Total: 17",
                    "annotation": "strength",
                    ...
                }
            }
        """
        data, error = read_json(roll_request_schema())
        if error:
            return error

        result = app.roll_service.roll(data['command'], style=data.get('style'))
        if not result.success:
            return _error_response(result)

        return jsonify({'success': True, 'result': result.data.to_dict()})

    @app.route('/api/batch_roll', methods=['POST'])
    def api_batch_roll():
        """
        JSON API: Roll a command several times.

        Request JSON:
            {"command": "2d20b + 5", "count": 6}
        """
        data, error = read_json(batch_roll_request_schema())
        if error:
            return error

        result = app.roll_service.batch_roll(data['command'], data['count'])
        if not result.success:
            return _error_response(result)

        return jsonify({'success': True, 'result': result.data.to_dict()})

    @app.route('/api/rpn', methods=['POST'])
    def api_rpn():
        """JSON API: Postfix form of an expression ({"command": "2 + 3 * 4"})."""
        data, error = read_json(rpn_request_schema())
        if error:
            return error

        result = app.roll_service.rpn(data['command'])
        if not result.success:
            return _error_response(result)

        return jsonify({'success': True, 'rpn': result.data})

    @app.route('/api/new_dice', methods=['POST'])
    def api_new_dice():
        """JSON API: Put the dice in dice jail and return a sample roll."""
        result = app.roll_service.new_dice()
        record = result.data
        return jsonify({
            'success': True,
            'sample': record_to_dict(record),
            'breakdown': format_record(record, app.roll_service.roller.style)
        })

    logger.info(f"Created dicebag API app ({config!r})")
    return app


def main():
    """Run the development server."""
    from dicebag.core.logging_config import setup_logging

    config = get_config()
    problems = config.problems()
    if problems:
        raise SystemExit(f"Invalid configuration: {'; '.join(problems)}")
    setup_logging(level=config.log_level, log_file=config.log_file)
    app = create_app(config)
    app.run(host=config.host, port=config.port, debug=config.debug)


if __name__ == '__main__':
    main()
