"""
SQLite persistence for mission results and player progress.

Design goals:
- Zero setup: creates the DB and tables automatically
- Simple API: record/fetch helpers, one progress row per player
"""

from __future__ import annotations

import json
import sqlite3
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from cleanspace_sim.missions import MissionResult, UserProgress


SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS mission_results (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  ts_unix INTEGER NOT NULL,
  ts_iso TEXT NOT NULL,
  mission_id TEXT NOT NULL,
  score INTEGER NOT NULL,
  completion_time INTEGER NOT NULL,
  objectives_completed INTEGER NOT NULL,
  total_objectives INTEGER NOT NULL,
  bonus_points INTEGER NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_mission_results_mission ON mission_results(mission_id);
CREATE TABLE IF NOT EXISTS progress (
  player_id TEXT PRIMARY KEY,
  completed_missions TEXT NOT NULL,
  total_score INTEGER NOT NULL,
  unlocked_achievements TEXT NOT NULL,
  total_xp INTEGER NOT NULL
);
"""


class ProgressStore:
    def __init__(self, db_path: str = "cleanspace.db") -> None:
        self.db_path = db_path

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def initialize(self) -> None:
        with self._connect() as conn:
            conn.executescript(SCHEMA_SQL)
            conn.commit()

    def record_result(self, result: MissionResult, *, now_utc: Optional[datetime] = None) -> None:
        if now_utc is None:
            now_utc = datetime.now(timezone.utc)

        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO mission_results (
                  ts_unix, ts_iso, mission_id, score, completion_time,
                  objectives_completed, total_objectives, bonus_points
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    int(now_utc.timestamp()),
                    now_utc.isoformat(),
                    result.mission_id,
                    int(result.score),
                    int(result.completion_time),
                    int(result.objectives_completed),
                    int(result.total_objectives),
                    int(result.bonus_points),
                ),
            )
            conn.commit()

    def fetch_results(self, mission_id: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        Results in insertion order, optionally for one mission.
        """
        with self._connect() as conn:
            if mission_id is None:
                cur = conn.execute("SELECT * FROM mission_results ORDER BY id ASC")
            else:
                cur = conn.execute(
                    "SELECT * FROM mission_results WHERE mission_id = ? ORDER BY id ASC",
                    (mission_id,),
                )
            return [dict(r) for r in cur.fetchall()]

    def best_score(self, mission_id: str) -> Optional[int]:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT MAX(score) AS best FROM mission_results WHERE mission_id = ?",
                (mission_id,),
            ).fetchone()
        return None if row["best"] is None else int(row["best"])

    def save_progress(self, progress: UserProgress, player_id: str = "player") -> None:
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO progress (
                  player_id, completed_missions, total_score, unlocked_achievements, total_xp
                ) VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(player_id) DO UPDATE SET
                  completed_missions = excluded.completed_missions,
                  total_score = excluded.total_score,
                  unlocked_achievements = excluded.unlocked_achievements,
                  total_xp = excluded.total_xp
                """,
                (
                    player_id,
                    json.dumps(list(progress.completed_missions)),
                    int(progress.total_score),
                    json.dumps(list(progress.unlocked_achievements)),
                    int(progress.total_xp),
                ),
            )
            conn.commit()

    def load_progress(self, player_id: str = "player") -> UserProgress:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM progress WHERE player_id = ?", (player_id,)
            ).fetchone()
        if row is None:
            return UserProgress()
        try:
            completed = json.loads(row["completed_missions"])
            achievements = json.loads(row["unlocked_achievements"])
        except json.JSONDecodeError as e:
            raise ValueError(f"Corrupt progress row for {player_id}: {e}") from e
        return UserProgress(
            completed_missions=tuple(completed),
            total_score=int(row["total_score"]),
            unlocked_achievements=tuple(achievements),
            total_xp=int(row["total_xp"]),
        )
