from sqlalchemy.orm import declarative_base

# Shared declarative base for the relational hit storage
Base = declarative_base()
