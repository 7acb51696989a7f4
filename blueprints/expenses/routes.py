from flask import jsonify
from flask_login import current_user

from . import expenses_bp
from services.expense_service import ExpenseService
from utils.api import json_body


@expenses_bp.route('/expenses', methods=['GET'])
def index():
    """Expenses of the caller and their family, newest first"""
    expenses = list(ExpenseService.list_expenses(current_user.id))
    currencies = [c.to_dict() for c in ExpenseService.list_currencies()]
    return jsonify({'expenses': expenses, 'currencies': currencies}), 200


@expenses_bp.route('/expenses', methods=['POST'])
def add():
    """Record an expense owned by the caller"""
    data = json_body()
    expense = ExpenseService.record_expense(
        current_user.id,
        amount=data.get('amount'),
        date=data.get('date'),
        category=data.get('category'),
        currency_id=data.get('currency', data.get('currencyId')),
        comment=data.get('comment'),
    )
    return jsonify(expense.to_dict()), 200


@expenses_bp.route('/expenses/<int:expense_id>/edit', methods=['POST'])
def edit(expense_id):
    data = json_body()
    expense = ExpenseService.update_expense(
        current_user.id,
        expense_id,
        amount=data.get('amount'),
        date=data.get('date'),
        category=data.get('category'),
        currency=data.get('currency', data.get('currencyId')),
        comment=data.get('comment'),
    )
    return jsonify(expense.to_dict()), 200


@expenses_bp.route('/expenses/<int:expense_id>/delete', methods=['POST'])
def delete(expense_id):
    ExpenseService.delete_expense(current_user.id, expense_id)
    return jsonify({'msg': 'Expense deleted.', 'id': expense_id}), 200
