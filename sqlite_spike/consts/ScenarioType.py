from enum import Enum


class ScenarioType(Enum):
    DATABASE_SIZE = "database_size"
    TIME_TO_CREATE_DATABASE = "time_to_create_database"
    TIME_TO_CREATE_MANY_DATABASES = "time_to_create_many_databases"
    TIME_TO_CREATE_SINGLE_DB = "time_to_create_single_db"
    BATCH_INSERT_AND_SINGLE_APPEND = "batch_insert_and_single_append"
