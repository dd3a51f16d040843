from models.schedule import Schedule
from models.section import Section
from models.subject import Subject
from models.teacher import Teacher

__all__ = [
	"Schedule",
	"Section",
	"Subject",
	"Teacher",
]
