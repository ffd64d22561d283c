# chatbot/chatbot_service.py
import logging
from functools import lru_cache

from core.ai_client import AIClient, get_ai_client
from core.exceptions import ValidationError

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = ("أنت لمّاح، مساعد دراسي ذكي يساعد الطلاب في فهم المواد الدراسية وتحسين مهاراتهم التعليمية. "
                 "أجب بشكل مفيد ودقيق ومختصر باللغة العربية. قدم معلومات علمية صحيحة وموثوقة.")

# Senders the chat UI uses for the student's own messages
USER_SENDERS = {'user', 'أنت'}
MAX_HISTORY_MESSAGES = 10
MAX_MESSAGE_CHARS = 4000


class ChatbotService:
    def __init__(self, ai_client: AIClient):
        self.ai_client = ai_client
        logger.info("Chatbot Service initialized using AIClient")

    @staticmethod
    def build_messages(user_message: str, chat_history=None):
        """
        Turn the UI's chat history into chat-completion messages.
        Entries may use `sender`/`text` or `role`/`content`.
        """
        messages = [{"role": "system", "content": SYSTEM_PROMPT}]
        for entry in (chat_history or [])[-MAX_HISTORY_MESSAGES:]:
            if not isinstance(entry, dict):
                continue
            text = entry.get('text') or entry.get('content')
            if not isinstance(text, str) or not text.strip():
                continue
            sender = entry.get('sender') or entry.get('role') or ''
            role = "user" if sender in USER_SENDERS else "assistant"
            messages.append({"role": role, "content": text.strip()[:MAX_MESSAGE_CHARS]})
        messages.append({"role": "user", "content": user_message})
        return messages

    def generate_response(self, user_message, chat_history=None) -> str:
        if not isinstance(user_message, str) or not user_message.strip():
            raise ValidationError('الرسالة مطلوبة')
        if chat_history is not None and not isinstance(chat_history, list):
            raise ValidationError('سجل المحادثة غير صالح')

        messages = self.build_messages(user_message.strip()[:MAX_MESSAGE_CHARS], chat_history)
        logger.info(f"Chat request with {len(messages) - 2} history messages")
        return self.ai_client.chat(messages, max_tokens=1000, temperature=0.7)


@lru_cache(maxsize=1)
def get_chatbot_service() -> ChatbotService:
    return ChatbotService(get_ai_client())
