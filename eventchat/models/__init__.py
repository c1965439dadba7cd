from eventchat.models.bot_conversation import BotConversation

__all__ = ["BotConversation"]
