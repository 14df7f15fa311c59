# Overview: Flask extension instances for the record store.

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()
