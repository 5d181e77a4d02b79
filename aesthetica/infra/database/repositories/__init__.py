from aesthetica.infra.database.repositories.chat_session import PostgresSessionStore, row_to_record

__all__ = ["PostgresSessionStore", "row_to_record"]
