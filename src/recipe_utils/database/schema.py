"""Database schema definitions for the recipe database."""

import sqlite3

DDL = """
CREATE TABLE IF NOT EXISTS recipe(
    id           TEXT PRIMARY KEY,
    title        TEXT NOT NULL,
    source_url   TEXT,
    source_type  TEXT NOT NULL DEFAULT 'manual',
    image_url    TEXT,
    servings     INTEGER,
    prep_time    TEXT,
    cook_time    TEXT,
    instructions TEXT NOT NULL DEFAULT '[]',
    notes        TEXT,
    is_in_queue  INTEGER NOT NULL DEFAULT 0,
    date_added   INTEGER NOT NULL,
    date_cooked  INTEGER
);

CREATE TABLE IF NOT EXISTS ingredient(
    id          TEXT PRIMARY KEY,
    recipe_id   TEXT NOT NULL,
    position    INTEGER NOT NULL DEFAULT 0,
    name        TEXT NOT NULL,
    quantity    TEXT,
    unit        TEXT,
    category    TEXT NOT NULL DEFAULT 'Other',
    is_optional INTEGER NOT NULL DEFAULT 0,
    FOREIGN KEY(recipe_id) REFERENCES recipe(id) ON DELETE CASCADE
);

CREATE TABLE IF NOT EXISTS pantry_item(
    id              TEXT PRIMARY KEY,
    name            TEXT NOT NULL,
    category        TEXT NOT NULL DEFAULT 'Other',
    quantity        TEXT,
    unit            TEXT,
    date_added      INTEGER NOT NULL,
    expiration_date INTEGER,
    notes           TEXT
);

CREATE TABLE IF NOT EXISTS grocery_list(
    id           TEXT PRIMARY KEY,
    name         TEXT NOT NULL,
    date_created INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS grocery_item(
    id                TEXT PRIMARY KEY,
    grocery_list_id   TEXT NOT NULL,
    name              TEXT NOT NULL,
    quantity          TEXT,
    unit              TEXT,
    category          TEXT NOT NULL DEFAULT 'Other',
    is_checked        INTEGER NOT NULL DEFAULT 0,
    source_recipe_ids TEXT NOT NULL DEFAULT '[]',
    FOREIGN KEY(grocery_list_id) REFERENCES grocery_list(id) ON DELETE CASCADE
);

CREATE TABLE IF NOT EXISTS meal_plan(
    id            TEXT PRIMARY KEY,
    date          INTEGER NOT NULL,
    meal_type     TEXT NOT NULL,
    recipe_id     TEXT,
    recipe_name   TEXT,
    notes         TEXT,
    is_completed  INTEGER NOT NULL DEFAULT 0,
    reminder      INTEGER NOT NULL DEFAULT 0,
    reminder_time INTEGER,
    FOREIGN KEY(recipe_id) REFERENCES recipe(id) ON DELETE SET NULL
);

"""


def create_schema(conn: sqlite3.Connection) -> None:
    """Create the database schema for recipes, pantry, grocery lists and meal plans.

    Args:
        conn: SQLite database connection
    """
    conn.executescript(DDL)
    conn.execute("PRAGMA foreign_keys = ON")
