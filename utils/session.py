from sqlalchemy.orm import sessionmaker

# Bound to an engine by IndexerProcessorServer.init_db_tables (or by tests)
Session = sessionmaker()
