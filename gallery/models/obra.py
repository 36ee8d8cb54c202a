"""
Artwork Model
"""

from datetime import datetime
from gallery.extensions import db


class Obra(db.Model):
    """An artwork published by an artist"""
    __tablename__ = 'obras'
    
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), index=True)
    title = db.Column(db.String(200))
    created_on = db.Column(db.Date)
    img = db.Column(db.String(255))
    video = db.Column(db.String(255))
    owner_name = db.Column(db.String(120))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    
    views = db.relationship('ObraView', backref='obra', lazy=True,
                            cascade='all, delete-orphan')
    
    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'title': self.title,
            'created_on': self.created_on.isoformat() if self.created_on else None,
            'img': self.img,
            'video': self.video,
            'owner_name': self.owner_name,
        }
    
    def __repr__(self):
        return f'<Obra {self.title}>'
