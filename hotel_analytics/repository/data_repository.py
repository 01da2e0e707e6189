"""Repository layer responsible for all database access."""

from __future__ import annotations

import random
import sqlite3
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from pathlib import Path
from typing import List, Optional

from hotel_analytics.domain.models import (
    ChatbotInteraction,
    HistoricalSnapshot,
    RoomTypeMetrics,
)
from hotel_analytics.utils.config import Settings, get_settings
from hotel_analytics.utils.logger import get_logger


logger = get_logger(__name__)


@dataclass(frozen=True)
class InventorySeed:
    room_type: str
    total_rooms: int
    occupancy_rate: float
    nightly_rate: float


SEED_INVENTORY = (
    InventorySeed("Standard", 20, 0.75, 100.0),
    InventorySeed("Deluxe", 15, 0.70, 150.0),
    InventorySeed("Suite", 8, 0.60, 250.0),
    InventorySeed("Executive", 10, 0.65, 200.0),
)

WEEKEND_RATE_UPLIFT = 1.15


@dataclass(frozen=True)
class FeedbackRecord:
    interaction_id: str
    rating: int
    comments: Optional[str]
    created_at: str


class DataRepository:
    """Encapsulates SQLite access so business logic stays storage-agnostic."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()
        self._db_path = Path(self._settings.database_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def database_path(self) -> Path:
        return self._db_path

    def _connect(self) -> sqlite3.Connection:
        connection = sqlite3.connect(self._db_path)
        connection.row_factory = sqlite3.Row
        connection.execute("PRAGMA foreign_keys = ON;")
        return connection

    def initialize_database(self) -> None:
        """Create all persistence artifacts before API startup."""
        try:
            with self._connect() as conn:
                cursor = conn.cursor()

                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS RoomInventory (
                        room_type TEXT PRIMARY KEY,
                        total_rooms INTEGER NOT NULL CHECK (total_rooms >= 0)
                    );
                    """
                )

                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS BookingHistory (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        room_type TEXT NOT NULL,
                        stay_date TEXT NOT NULL,
                        rooms_booked INTEGER NOT NULL CHECK (rooms_booked >= 0),
                        average_rate REAL NOT NULL CHECK (average_rate >= 0),
                        FOREIGN KEY (room_type) REFERENCES RoomInventory(room_type)
                    );
                    """
                )

                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS LocalEvents (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        event_date TEXT NOT NULL,
                        name TEXT NOT NULL
                    );
                    """
                )

                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS ChatbotInteractions (
                        interaction_id TEXT PRIMARY KEY,
                        session_id TEXT NOT NULL,
                        customer_id TEXT,
                        query TEXT NOT NULL,
                        query_intent TEXT,
                        extracted_entities TEXT NOT NULL DEFAULT '{}',
                        response TEXT NOT NULL,
                        response_type TEXT NOT NULL,
                        confidence_level REAL NOT NULL,
                        processing_time_ms INTEGER NOT NULL,
                        user_feedback INTEGER,
                        timestamp TEXT NOT NULL
                    );
                    """
                )

                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS ChatbotFeedback (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        interaction_id TEXT NOT NULL,
                        rating INTEGER NOT NULL CHECK (rating BETWEEN 1 AND 5),
                        comments TEXT,
                        created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
                        FOREIGN KEY (interaction_id) REFERENCES ChatbotInteractions(interaction_id)
                    );
                    """
                )

                cursor.execute(
                    """
                    CREATE INDEX IF NOT EXISTS idx_booking_type_date
                    ON BookingHistory(room_type, stay_date);
                    """
                )
                cursor.execute(
                    """
                    CREATE INDEX IF NOT EXISTS idx_events_date
                    ON LocalEvents(event_date);
                    """
                )
                cursor.execute(
                    """
                    CREATE INDEX IF NOT EXISTS idx_interactions_customer_time
                    ON ChatbotInteractions(customer_id, timestamp);
                    """
                )
                conn.commit()
            logger.info("Database initialized at %s", self._db_path)
        except sqlite3.Error as exc:
            raise RuntimeError(f"Database initialization failed: {exc}") from exc

    def seed_synthetic_data(self) -> None:
        """Seed deterministic synthetic booking history only when tables are empty."""
        random.seed(self._settings.synthetic_random_seed)
        try:
            with self._connect() as conn:
                cursor = conn.cursor()

                cursor.execute("SELECT COUNT(*) AS count FROM RoomInventory;")
                if int(cursor.fetchone()["count"]) > 0:
                    logger.info("Synthetic data already present; skipping seed")
                    return

                cursor.executemany(
                    "INSERT INTO RoomInventory (room_type, total_rooms) VALUES (?, ?);",
                    [(seed.room_type, seed.total_rooms) for seed in SEED_INVENTORY],
                )

                start_date = datetime.now(timezone.utc).date() - timedelta(
                    days=self._settings.synthetic_seed_days
                )
                booking_entries = []
                for offset in range(self._settings.synthetic_seed_days):
                    stay_date = start_date + timedelta(days=offset)
                    weekend = stay_date.weekday() >= 5
                    for seed in SEED_INVENTORY:
                        booked = sum(
                            1
                            for _ in range(seed.total_rooms)
                            if random.random() < seed.occupancy_rate
                        )
                        rate = seed.nightly_rate * random.uniform(0.9, 1.1)
                        if weekend:
                            rate *= WEEKEND_RATE_UPLIFT
                        booking_entries.append(
                            (seed.room_type, stay_date.isoformat(), booked, round(rate, 2))
                        )

                cursor.executemany(
                    """
                    INSERT INTO BookingHistory (room_type, stay_date, rooms_booked, average_rate)
                    VALUES (?, ?, ?, ?);
                    """,
                    booking_entries,
                )
                conn.commit()
            logger.info(
                "Synthetic seed completed with %s records",
                len(booking_entries),
            )
        except sqlite3.Error as exc:
            raise RuntimeError(f"Synthetic data seeding failed: {exc}") from exc

    def add_local_event(self, event_date: date, name: str) -> int:
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "INSERT INTO LocalEvents (event_date, name) VALUES (?, ?);",
                (event_date.isoformat(), name),
            )
            conn.commit()
            return int(cursor.lastrowid)

    def load_historical_snapshot(self) -> HistoricalSnapshot:
        """Aggregate inventory, booking history and events into one snapshot."""
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT
                    ri.room_type,
                    ri.total_rooms,
                    COUNT(bh.id) AS history_days,
                    COALESCE(SUM(bh.rooms_booked), 0) AS rooms_booked,
                    COALESCE(AVG(bh.average_rate), 0.0) AS average_price
                FROM RoomInventory AS ri
                LEFT JOIN BookingHistory AS bh ON bh.room_type = ri.room_type
                GROUP BY ri.room_type, ri.total_rooms
                ORDER BY ri.room_type ASC;
                """
            )
            metrics: dict[str, RoomTypeMetrics] = {}
            for row in cursor.fetchall():
                total_rooms = int(row["total_rooms"])
                capacity = int(row["history_days"]) * total_rooms
                occupancy = float(row["rooms_booked"]) / capacity if capacity else 0.0
                metrics[str(row["room_type"])] = RoomTypeMetrics(
                    room_type=str(row["room_type"]),
                    total_rooms=total_rooms,
                    average_price=float(row["average_price"]),
                    occupancy_rate=min(1.0, occupancy),
                )

            cursor.execute(
                """
                SELECT event_date, COUNT(*) AS event_count
                FROM LocalEvents
                GROUP BY event_date;
                """
            )
            events = {
                date.fromisoformat(str(row["event_date"])): int(row["event_count"])
                for row in cursor.fetchall()
            }
        return HistoricalSnapshot(room_metrics=metrics, local_events=events)

    def save_interaction(self, interaction: ChatbotInteraction) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO ChatbotInteractions (
                    interaction_id, session_id, customer_id, query, query_intent,
                    extracted_entities, response, response_type, confidence_level,
                    processing_time_ms, user_feedback, timestamp
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?);
                """,
                (
                    interaction.interaction_id,
                    interaction.session_id,
                    interaction.customer_id,
                    interaction.query,
                    interaction.query_intent,
                    interaction.extracted_entities,
                    interaction.response,
                    interaction.response_type,
                    interaction.confidence_level,
                    interaction.processing_time_ms,
                    interaction.user_feedback,
                    interaction.timestamp,
                ),
            )
            conn.commit()

    @staticmethod
    def _row_to_interaction(row: sqlite3.Row) -> ChatbotInteraction:
        feedback = row["user_feedback"]
        return ChatbotInteraction(
            interaction_id=str(row["interaction_id"]),
            session_id=str(row["session_id"]),
            customer_id=row["customer_id"],
            query=str(row["query"]),
            query_intent=row["query_intent"],
            extracted_entities=str(row["extracted_entities"]),
            response=str(row["response"]),
            response_type=str(row["response_type"]),
            confidence_level=float(row["confidence_level"]),
            processing_time_ms=int(row["processing_time_ms"]),
            user_feedback=int(feedback) if feedback is not None else None,
            timestamp=str(row["timestamp"]),
        )

    def get_interaction(self, interaction_id: str) -> Optional[ChatbotInteraction]:
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT * FROM ChatbotInteractions WHERE interaction_id = ?;",
                (interaction_id,),
            )
            row = cursor.fetchone()
            if row is None:
                return None
            return self._row_to_interaction(row)

    def list_interactions(self, customer_id: str, limit: int) -> List[ChatbotInteraction]:
        """Most recent interactions for a customer, newest first."""
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT *
                FROM ChatbotInteractions
                WHERE customer_id = ?
                ORDER BY timestamp DESC, rowid DESC
                LIMIT ?;
                """,
                (customer_id, limit),
            )
            return [self._row_to_interaction(row) for row in cursor.fetchall()]

    def save_feedback(
        self,
        interaction_id: str,
        rating: int,
        comments: Optional[str] = None,
    ) -> FeedbackRecord:
        created_at = datetime.now(timezone.utc).isoformat()
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO ChatbotFeedback (interaction_id, rating, comments, created_at)
                VALUES (?, ?, ?, ?);
                """,
                (interaction_id, rating, comments, created_at),
            )
            cursor.execute(
                "UPDATE ChatbotInteractions SET user_feedback = ? WHERE interaction_id = ?;",
                (rating, interaction_id),
            )
            conn.commit()
        return FeedbackRecord(
            interaction_id=interaction_id,
            rating=rating,
            comments=comments,
            created_at=created_at,
        )
