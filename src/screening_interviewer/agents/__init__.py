"""
Agents module containing the semantic extraction agents.

Each agent handles one kind of request to the understanding backend.
"""

from screening_interviewer.agents.gateway import SemanticExtractionGateway
from screening_interviewer.agents.jd_selector import JobDescriptionSelector
from screening_interviewer.agents.name_extractor import NameExtractor
from screening_interviewer.agents.question_generator import QuestionGenerator
from screening_interviewer.agents.response_assessor import ResponseAssessor, parse_assessment

__all__ = [
    "JobDescriptionSelector",
    "NameExtractor",
    "QuestionGenerator",
    "ResponseAssessor",
    "SemanticExtractionGateway",
    "parse_assessment",
]
