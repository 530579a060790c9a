import sqlite3
from typing import Optional, List
from dataclasses import dataclass


@dataclass
class Action:
    name: str
    roll: str


class ActionsDB:
    """動作（已儲存的擲骰指令）數據庫類"""
    def __init__(self, db_path: str = "actions.db"):
        self.db_path = db_path
        self.init_db()

    def init_db(self):
        """初始化數據庫"""
        conn = sqlite3.connect(self.db_path)
        cursor = conn.cursor()

        # 創建動作表
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS actions (
                name TEXT PRIMARY KEY,
                roll TEXT NOT NULL
            )
        ''')

        # 創建計數器表
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS counters (
                name TEXT PRIMARY KEY,
                value INTEGER NOT NULL
            )
        ''')

        conn.commit()
        conn.close()

    def increment_counter(self, name: str) -> int:
        """計數器加一並返回新的值"""
        conn = sqlite3.connect(self.db_path)
        cursor = conn.cursor()

        cursor.execute('''
            INSERT INTO counters (name, value)
            VALUES (?, 1)
            ON CONFLICT(name)
            DO UPDATE SET value=value + 1
        ''', (name,))
        cursor.execute('''
            SELECT value FROM counters WHERE name = ?
        ''', (name,))
        value = cursor.fetchone()[0]

        conn.commit()
        conn.close()
        return value

    def add_or_update_action(self, name: str, roll: str) -> bool:
        """添加或更新動作，返回動作是否已存在"""
        existed = self.get_action_roll(name) is not None

        conn = sqlite3.connect(self.db_path)
        cursor = conn.cursor()

        cursor.execute('''
            INSERT INTO actions (name, roll)
            VALUES (?, ?)
            ON CONFLICT(name)
            DO UPDATE SET roll=excluded.roll
        ''', (name, roll))

        conn.commit()
        conn.close()
        return existed

    def get_action_roll(self, name: str) -> Optional[str]:
        """查找動作的擲骰指令"""
        conn = sqlite3.connect(self.db_path)
        cursor = conn.cursor()

        cursor.execute('''
            SELECT roll FROM actions WHERE name = ?
        ''', (name,))

        row = cursor.fetchone()
        conn.close()

        if row:
            return row[0]
        return None

    def delete_action(self, name: str) -> bool:
        """刪除動作，返回是否有刪除"""
        conn = sqlite3.connect(self.db_path)
        cursor = conn.cursor()

        cursor.execute('''
            DELETE FROM actions WHERE name = ?
        ''', (name,))
        deleted = cursor.rowcount > 0

        conn.commit()
        conn.close()
        return deleted

    def list_actions(self) -> List[Action]:
        """獲取所有動作"""
        conn = sqlite3.connect(self.db_path)
        cursor = conn.cursor()

        cursor.execute('''
            SELECT name, roll FROM actions ORDER BY name
        ''')

        rows = cursor.fetchall()
        conn.close()

        return [Action(name=row[0], roll=row[1]) for row in rows]
