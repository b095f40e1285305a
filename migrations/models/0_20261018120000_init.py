from tortoise import BaseDBAsyncClient

RUN_IN_TRANSACTION = True


async def upgrade(db: BaseDBAsyncClient) -> str:
    return """
        CREATE TABLE IF NOT EXISTS "users" (
    "id" SERIAL NOT NULL PRIMARY KEY,
    "external_id" VARCHAR(255) NOT NULL UNIQUE,
    "username" VARCHAR(150) NOT NULL UNIQUE,
    "email" VARCHAR(255),
    "name" VARCHAR(255) NOT NULL,
    "created_at" TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP
);
CREATE TABLE IF NOT EXISTS "plants" (
    "id" SERIAL NOT NULL PRIMARY KEY,
    "name" VARCHAR(255) NOT NULL,
    "species" VARCHAR(255),
    "description" TEXT,
    "image_url" VARCHAR(1000),
    "acquired_date" TIMESTAMPTZ,
    "status" VARCHAR(15) NOT NULL DEFAULT 'healthy',
    "last_watered" TIMESTAMPTZ,
    "water_frequency_days" INT,
    "light_requirement" VARCHAR(6),
    "created_at" TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "user_id" INT NOT NULL REFERENCES "users" ("id") ON DELETE CASCADE
);
COMMENT ON COLUMN "plants"."status" IS 'HEALTHY: healthy\nNEEDS_CARE: needs_care\nNEEDS_ATTENTION: needs_attention';
COMMENT ON COLUMN "plants"."light_requirement" IS 'LOW: low\nMEDIUM: medium\nHIGH: high';
CREATE TABLE IF NOT EXISTS "environment_readings" (
    "id" SERIAL NOT NULL PRIMARY KEY,
    "temperature" DOUBLE PRECISION,
    "humidity" DOUBLE PRECISION,
    "light_level" VARCHAR(6),
    "soil_moisture" DOUBLE PRECISION,
    "reading_timestamp" TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "user_id" INT NOT NULL REFERENCES "users" ("id") ON DELETE CASCADE
);
COMMENT ON COLUMN "environment_readings"."light_level" IS 'LOW: low\nMEDIUM: medium\nHIGH: high';
CREATE TABLE IF NOT EXISTS "care_tasks" (
    "id" SERIAL NOT NULL PRIMARY KEY,
    "task_type" VARCHAR(9) NOT NULL,
    "due_date" TIMESTAMPTZ NOT NULL,
    "completed" BOOL NOT NULL DEFAULT False,
    "completed_date" TIMESTAMPTZ,
    "skipped" BOOL NOT NULL DEFAULT False,
    "plant_id" INT NOT NULL REFERENCES "plants" ("id") ON DELETE CASCADE
);
COMMENT ON COLUMN "care_tasks"."task_type" IS 'WATER: water\nPRUNE: prune\nFERTILIZE: fertilize\nLIGHT: light';
CREATE TABLE IF NOT EXISTS "care_history" (
    "id" SERIAL NOT NULL PRIMARY KEY,
    "action_type" VARCHAR(64) NOT NULL,
    "notes" TEXT,
    "performed_at" TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "plant_id" INT NOT NULL REFERENCES "plants" ("id") ON DELETE CASCADE
);
CREATE TABLE IF NOT EXISTS "recommendations" (
    "id" SERIAL NOT NULL PRIMARY KEY,
    "recommendation_type" VARCHAR(7) NOT NULL,
    "message" TEXT NOT NULL,
    "applied" BOOL NOT NULL DEFAULT False,
    "created_at" TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "plant_id" INT REFERENCES "plants" ("id") ON DELETE CASCADE,
    "user_id" INT NOT NULL REFERENCES "users" ("id") ON DELETE CASCADE
);
COMMENT ON COLUMN "recommendations"."recommendation_type" IS 'WATER: water\nLIGHT: light\nPRUNING: pruning';
CREATE TABLE IF NOT EXISTS "plant_health_metrics" (
    "id" SERIAL NOT NULL PRIMARY KEY,
    "water_level" INT NOT NULL DEFAULT 100,
    "light_level" INT NOT NULL DEFAULT 100,
    "overall_health" INT NOT NULL DEFAULT 100,
    "updated_at" TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "plant_id" INT NOT NULL UNIQUE REFERENCES "plants" ("id") ON DELETE CASCADE
);
CREATE TABLE IF NOT EXISTS "species_profiles" (
    "id" SERIAL NOT NULL PRIMARY KEY,
    "external_id" INT,
    "query" VARCHAR(255) NOT NULL,
    "details" JSONB NOT NULL,
    "synced_at" TIMESTAMPTZ NOT NULL,
    "plant_id" INT NOT NULL UNIQUE REFERENCES "plants" ("id") ON DELETE CASCADE
);
CREATE TABLE IF NOT EXISTS "aerich" (
    "id" SERIAL NOT NULL PRIMARY KEY,
    "version" VARCHAR(255) NOT NULL,
    "app" VARCHAR(100) NOT NULL,
    "content" JSONB NOT NULL
);"""


async def downgrade(db: BaseDBAsyncClient) -> str:
    return """
        DROP TABLE IF EXISTS "species_profiles";
        DROP TABLE IF EXISTS "plant_health_metrics";
        DROP TABLE IF EXISTS "recommendations";
        DROP TABLE IF EXISTS "care_history";
        DROP TABLE IF EXISTS "care_tasks";
        DROP TABLE IF EXISTS "environment_readings";
        DROP TABLE IF EXISTS "plants";
        DROP TABLE IF EXISTS "users";"""
