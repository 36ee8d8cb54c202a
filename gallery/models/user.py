"""
User Model
"""

from datetime import datetime
from flask_login import UserMixin
from gallery.extensions import db


class User(UserMixin, db.Model):
    """Artist or administrator account"""
    __tablename__ = 'users'
    
    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    name = db.Column(db.String(120))
    description = db.Column(db.Text)
    photo = db.Column(db.String(255))
    # Pending administrator approval until an admin clears it
    blocked = db.Column(db.Boolean, default=True, nullable=False)
    is_admin = db.Column(db.Boolean, default=False, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    
    obras = db.relationship('Obra', backref='owner', lazy=True)
    
    def to_dict(self):
        return {
            'id': self.id,
            'email': self.email,
            'name': self.name,
            'description': self.description,
            'photo': self.photo,
            'blocked': self.blocked,
            'is_admin': self.is_admin,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
    
    def __repr__(self):
        return f'<User {self.email}>'
