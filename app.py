import logging
from datetime import datetime

from flask import Flask, request, jsonify, current_app
from flask_cors import CORS

from config import Config
from database import Database
from exceptions import SettlementError
from models import Expense
from settlement import settle
from utils import (
    build_settlement_message,
    member_id,
    parse_amount_to_cents,
    send_whatsapp_notification,
    validate_expense_data,
    validate_notify_members
)

logger = logging.getLogger(__name__)


def expense_from_payload(data: dict, pool_id: str) -> Expense:
    """Build an Expense from a validated request payload"""
    if 'amount_cents' in data:
        amount_cents = data['amount_cents']
    else:
        amount_cents = parse_amount_to_cents(data['amount'])

    return Expense.from_dict({
        'id': data.get('id'),
        'description': data['description'].strip(),
        'amount_cents': amount_cents,
        'paid_by': member_id(data['paid_by']),
        'split_between': [member_id(m) for m in data['split_between']],
        'created_at': datetime.now(),
        'pool_id': pool_id,
        'paid_by_name': data.get('paid_by_name')
    })


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)
    CORS(app)

    logging.basicConfig(level=app.config.get('LOG_LEVEL', 'INFO'))

    app.extensions['expense_db'] = Database(app.config['DATABASE_PATH'])

    def get_db() -> Database:
        return current_app.extensions['expense_db']

    def strategy_from(value):
        return value or current_app.config['SETTLEMENT_STRATEGY']

    @app.route('/')
    def health_check():
        return jsonify({
            'message': 'PoolUp expense splitter is running!',
            'timestamp': datetime.now().isoformat(),
            'status': 'healthy'
        })

    @app.route('/api/pools', methods=['GET'])
    def list_pools():
        """List pools that have recorded expenses"""
        return jsonify({
            'success': True,
            'pools': get_db().get_pool_ids()
        }), 200

    @app.route('/api/pools/<pool_id>/expenses', methods=['POST'])
    def create_expense(pool_id):
        """Add an expense to a pool"""
        data = request.get_json(silent=True)

        is_valid, error_message = validate_expense_data(data)
        if not is_valid:
            return jsonify({'error': error_message}), 400

        expense = expense_from_payload(data, pool_id)
        # ids are always assigned by the ledger
        expense.id = None
        get_db().save_expense(expense)

        logger.info("Added expense %s (%d cents) to pool %s", expense.id, expense.amount_cents, pool_id)

        return jsonify({
            'success': True,
            'expense': expense.to_dict()
        }), 201

    @app.route('/api/pools/<pool_id>/expenses', methods=['GET'])
    def list_expenses(pool_id):
        """List the expenses of a pool"""
        expenses = get_db().get_pool_expenses(pool_id)

        return jsonify({
            'success': True,
            'expenses': [e.to_dict() for e in expenses]
        }), 200

    @app.route('/api/expenses/<expense_id>', methods=['GET'])
    def get_expense(expense_id):
        """Get a specific expense"""
        expense = get_db().get_expense_by_id(expense_id)

        if not expense:
            return jsonify({'error': 'Expense not found'}), 404

        return jsonify({
            'success': True,
            'expense': expense.to_dict()
        }), 200

    @app.route('/api/expenses/<expense_id>', methods=['DELETE'])
    def delete_expense(expense_id):
        """Delete an expense"""
        if not get_db().delete_expense(expense_id):
            return jsonify({'error': 'Expense not found'}), 404

        return jsonify({
            'success': True,
            'message': 'Expense deleted successfully'
        }), 200

    @app.route('/api/pools/<pool_id>/settlement', methods=['GET'])
    def pool_settlement(pool_id):
        """Balances and payback suggestions for a pool"""
        expenses = get_db().get_pool_expenses(pool_id)
        summary = settle(expenses, strategy_from(request.args.get('strategy')))

        return jsonify({
            'success': True,
            'pool_id': pool_id,
            **summary.to_dict()
        }), 200

    @app.route('/api/settlements/calculate', methods=['POST'])
    def calculate_settlement():
        """Settle an expense list sent in the request without storing it"""
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            data = {}

        items = data.get('expenses')
        if not isinstance(items, list):
            return jsonify({'error': 'expenses must be a list'}), 400

        expenses = []
        for index, item in enumerate(items):
            is_valid, error_message = validate_expense_data(item)
            if not is_valid:
                return jsonify({'error': f"Expense {index + 1}: {error_message}"}), 400

            expense = expense_from_payload(item, str(data.get('pool_id', '1')))
            if expense.id is None:
                expense.id = str(index + 1)
            expenses.append(expense)

        summary = settle(expenses, strategy_from(data.get('strategy')))

        return jsonify({
            'success': True,
            **summary.to_dict()
        }), 200

    @app.route('/api/pools/<pool_id>/notify', methods=['POST'])
    def notify_pool(pool_id):
        """Send each member a WhatsApp summary of what they owe or are owed"""
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            data = {}

        members = data.get('members')
        is_valid, error_message = validate_notify_members(members)
        if not is_valid:
            return jsonify({'error': error_message}), 400

        summary = settle(get_db().get_pool_expenses(pool_id), strategy_from(data.get('strategy')))
        names = {member_id(m['id']): m.get('name') or member_id(m['id']) for m in members}
        pool_name = data.get('pool_name') or f"pool {pool_id}"

        results = []
        for member in members:
            participant = member_id(member['id'])
            message = build_settlement_message(
                participant,
                names[participant],
                summary.balances,
                summary.paybacks,
                pool_name=pool_name,
                names=names
            )
            success = send_whatsapp_notification(member.get('phone_number'), message, names[participant])
            results.append({'id': participant, 'name': names[participant], 'success': success})

        return jsonify({
            'success': True,
            'notifications': results
        }), 200

    @app.errorhandler(SettlementError)
    def settlement_error(error):
        return jsonify({'error': str(error)}), 400

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({'error': 'Endpoint not found'}), 404

    @app.errorhandler(500)
    def internal_error(error):
        logger.exception("Unhandled error: %s", error)
        return jsonify({'error': 'Internal server error'}), 500

    return app


if __name__ == '__main__':
    app = create_app()
    logger.info("Starting PoolUp expense splitter...")
    logger.info("Database: %s", Config.DATABASE_PATH)
    logger.info("Twilio configured: %s", bool(Config.TWILIO_ACCOUNT_SID))
    app.run(host='0.0.0.0', port=5000, debug=Config.DEBUG)
