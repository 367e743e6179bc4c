import sqlite3
import json
import uuid
from datetime import datetime
from typing import List, Optional
from models import Expense
from config import Config

class Database:
    """Database manager for pool expense records"""

    def __init__(self, db_path: str = None):
        self.db_path = db_path or Config.DATABASE_PATH
        self.init_db()

    def get_connection(self):
        """Get database connection"""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def init_db(self):
        """Initialize database tables"""
        conn = self.get_connection()
        cursor = conn.cursor()

        cursor.execute('''
            CREATE TABLE IF NOT EXISTS expenses (
                id TEXT PRIMARY KEY,
                pool_id TEXT NOT NULL,
                description TEXT,
                amount_cents INTEGER NOT NULL,
                paid_by TEXT NOT NULL,
                paid_by_name TEXT,
                split_between TEXT NOT NULL,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                seq INTEGER
            )
        ''')

        cursor.execute('''
            CREATE INDEX IF NOT EXISTS idx_expenses_pool ON expenses (pool_id, seq)
        ''')

        conn.commit()
        conn.close()

    def _row_to_expense(self, row) -> Expense:
        return Expense(
            id=row['id'],
            description=row['description'],
            amount_cents=row['amount_cents'],
            paid_by=row['paid_by'],
            split_between=json.loads(row['split_between']),
            created_at=datetime.fromisoformat(row['created_at']),
            pool_id=row['pool_id'],
            paid_by_name=row['paid_by_name']
        )

    def save_expense(self, expense: Expense) -> str:
        """Save expense to database"""
        if not expense.id:
            expense.id = uuid.uuid4().hex

        conn = self.get_connection()
        cursor = conn.cursor()

        # seq keeps insertion order stable when created_at values collide
        cursor.execute('''
            INSERT INTO expenses (id, pool_id, description, amount_cents, paid_by,
                                  paid_by_name, split_between, created_at, seq)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?,
                    (SELECT COALESCE(MAX(seq), 0) + 1 FROM expenses))
        ''', (
            expense.id,
            expense.pool_id,
            expense.description,
            expense.amount_cents,
            expense.paid_by,
            expense.paid_by_name,
            json.dumps(list(expense.split_between)),
            expense.created_at.isoformat()
        ))

        conn.commit()
        conn.close()

        return expense.id

    def get_pool_expenses(self, pool_id: str) -> List[Expense]:
        """Retrieve all expenses of a pool, oldest first"""
        conn = self.get_connection()
        cursor = conn.cursor()

        cursor.execute('''
            SELECT * FROM expenses WHERE pool_id = ? ORDER BY seq ASC
        ''', (pool_id,))

        rows = cursor.fetchall()
        conn.close()

        return [self._row_to_expense(row) for row in rows]

    def get_pool_ids(self) -> List[str]:
        """List pools that have at least one expense"""
        conn = self.get_connection()
        cursor = conn.cursor()

        cursor.execute('SELECT DISTINCT pool_id FROM expenses ORDER BY pool_id')
        rows = cursor.fetchall()
        conn.close()

        return [row['pool_id'] for row in rows]

    def get_expense_by_id(self, expense_id: str) -> Optional[Expense]:
        """Retrieve a specific expense by ID"""
        conn = self.get_connection()
        cursor = conn.cursor()

        cursor.execute('SELECT * FROM expenses WHERE id = ?', (expense_id,))
        row = cursor.fetchone()
        conn.close()

        if not row:
            return None

        return self._row_to_expense(row)

    def delete_expense(self, expense_id: str) -> bool:
        """Delete an expense"""
        conn = self.get_connection()
        cursor = conn.cursor()

        cursor.execute('DELETE FROM expenses WHERE id = ?', (expense_id,))
        deleted = cursor.rowcount > 0

        conn.commit()
        conn.close()

        return deleted
