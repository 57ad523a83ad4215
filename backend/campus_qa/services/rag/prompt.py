"""
Prompt assembly for the student Q&A pipeline.

The template keeps the model inside the retrieved context: it must answer
from NGỮ CẢNH only, reply with a fixed sentence when the context does not
cover the question, and answer in Vietnamese.
"""

from collections.abc import Iterable

from langchain_core.prompts import PromptTemplate

from campus_qa.services.rag.retriever import RetrievedDocument

NO_INFORMATION_ANSWER = "Xin lỗi, tôi không tìm thấy thông tin này trong tài liệu."

CONTEXT_SEPARATOR = "\n\n"

ANSWER_TEMPLATE = f"""Bạn là một trợ lý AI hữu ích của trường đại học.
Nhiệm vụ của bạn là trả lời câu hỏi của sinh viên dựa trên các tài liệu nội bộ của trường.
Chỉ sử dụng thông tin từ "NGỮ CẢNH" được cung cấp.
Nếu "NGỮ CẢNH" không chứa thông tin để trả lời, hãy nói: "{NO_INFORMATION_ANSWER}"
Không được bịa đặt thông tin.

NGỮ CẢNH:
{{context}}

CÂU HỎI:
{{question}}

CÂU TRẢ LỜI (bằng tiếng Việt):
"""

ANSWER_PROMPT = PromptTemplate.from_template(ANSWER_TEMPLATE)


def build_context(documents: Iterable[RetrievedDocument]) -> str:
    """Join chunk texts with one blank line, keeping retrieval order."""
    return CONTEXT_SEPARATOR.join(doc.text for doc in documents)


def build_prompt(context: str, question: str) -> str:
    return ANSWER_PROMPT.format(context=context, question=question)
