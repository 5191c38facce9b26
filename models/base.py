"""
Database Base Module

Holds the SQLAlchemy extension object shared by every model.
Kept separate from the models to avoid circular imports.
"""

from flask_sqlalchemy import SQLAlchemy

# Bound to an application in create_app() (app.py)
db = SQLAlchemy()
