from sqlalchemy.orm import declarative_base

# Declarative base shared by every ORM model
Base = declarative_base()
