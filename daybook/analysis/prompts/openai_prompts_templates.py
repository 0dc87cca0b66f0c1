from typing import Any, Dict, List

# 📝 System prompts
SUMMARY_SYSTEM_PROMPT: str = (
    "You are a compassionate journaling companion writing a weekly summary of a user's entries.\n"
    "Guidelines:\n"
    "- Be warm, supportive and non-judgmental.\n"
    "- Point out patterns in mood, emotions and experiences.\n"
    "- Highlight growth and positive moments; acknowledge challenges with empathy.\n"
    "- 2–3 conversational sentences addressed to the user as \"you\".\n"
    "- No clinical language."
)

RECOMMENDATIONS_SYSTEM_PROMPT: str = (
    "You are a supportive wellness coach. Read the user's journal entries and return exactly 3 recommendations.\n"
    "1) a journaling prompt (category \"growth\")\n"
    "2) a second journaling prompt (category \"growth\")\n"
    "3) a mindfulness or physical activity (category \"mindfulness\" or \"lifestyle\")\n\n"
    "Each recommendation is an object:\n"
    "{\"icon\": str, \"title\": str (max 4 words), \"description\": str (1–2 sentences),\n"
    " \"actionText\": str, \"category\": str, \"priority\": \"high\" | \"medium\" | \"low\"}\n\n"
    "Guidelines:\n"
    "- Journaling actions start with 'Write:' followed by the prompt.\n"
    "- Icons are SF Symbols names such as \"pencil.and.outline\", \"wind\", \"figure.walk\".\n"
    "- Priority reflects emotional urgency: high for concerning patterns, medium for growth, low for maintenance.\n"
    "Return ONLY a JSON array with exactly 3 objects."
)

# 📅 User prompt templates
SUMMARY_EMPTY_WEEK_PROMPT: str = (
    "The user hasn't written any journal entries this week. "
    "Write a short encouraging message about starting their journaling journey."
)
SUMMARY_INTRO: str = "Summarize this week's journal entries warmly and insightfully:\n\n"
SUMMARY_INSTRUCTIONS: str = (
    "\nIn 2–3 sentences:\n"
    "1. Acknowledge the user's emotional journey this week.\n"
    "2. Highlight patterns, growth or insights.\n"
    "3. Offer gentle encouragement or validation."
)

RECOMMENDATIONS_EMPTY_WEEK_PROMPT: str = (
    "The user hasn't written any journal entries this week. Provide 3 recommendations:\n"
    "1. A gentle journaling prompt to help them start\n"
    "2. A self-reflection journaling prompt\n"
    "3. A simple mindfulness activity"
)
RECOMMENDATIONS_INTRO: str = "Read this week's journal entries and suggest 3 personalized recommendations:\n\n"
RECOMMENDATIONS_INSTRUCTIONS: str = (
    "\nProvide exactly 3 recommendations:\n"
    "1. A journaling prompt addressing their current emotional state or patterns\n"
    "2. A journaling prompt that encourages growth or deeper self-reflection\n"
    "3. A mindfulness exercise or physical activity that would help right now"
)

# 🏷️ Classification
TOPIC_CLASSIFICATION_TEMPLATE: str = (
    "Which of these topics does the journal entry below relate to? Topics: {labels}\n\n"
    "Journal entry:\n{content}\n\n"
    "Rules:\n"
    "- Select only topics that are clearly relevant; several may apply.\n"
    "- If none fit, answer \"None\".\n"
    "- Answer with the topic names only, separated by commas."
)

EMOTION_CLASSIFICATION_TEMPLATE: str = (
    "Which of these emotions is the person most likely feeling, judging by today's journal answers? "
    "Emotions: {labels}\n\n"
    "Answers:\n{content}\n\n"
    "Rules:\n"
    "- Select only emotions that are clearly evident; several may apply.\n"
    "- Consider the overall tone of all answers together.\n"
    "- If none fit, answer \"None\".\n"
    "- Answer with the emotion names only, separated by commas."
)

EMOTION_LABELS: List[str] = [
    "Anxiety",
    "Excitement",
    "Loneliness",
    "Focused",
    "Grateful",
    "Tired",
    "Stressed",
    "Peaceful",
    "Motivated",
    "Overwhelmed",
]

TOPIC_CLASSIFICATION_MAX_TOKENS: int = 50
TOPIC_CLASSIFICATION_TEMPERATURE: float = 0.3
EMOTION_CLASSIFICATION_MAX_TOKENS: int = 30
EMOTION_CLASSIFICATION_TEMPERATURE: float = 0.2

# 💬 Chat companion
CHAT_SYSTEM_PROMPT: str = (
    "You are a compassionate journal companion. Have a meaningful conversation with the user "
    "about their thoughts, feelings and experiences.\n"
    "Guidelines:\n"
    "- Be warm, empathetic and non-judgmental.\n"
    "- Ask thoughtful follow-up questions that encourage deeper reflection.\n"
    "- Reference their journal entries and patterns when relevant.\n"
    "- Keep replies conversational and personal (2–4 sentences), addressing the user as \"you\".\n"
    "- Avoid clinical language; speak like a caring friend.\n\n"
    "Context about the user:\n{context}"
)
CHAT_CONTEXT_INTRO: str = "Journal entries from the past week:\n\n"
CHAT_NO_ENTRIES_CONTEXT: str = "The user has not written any journal entries in the past week."

CHAT_HISTORY_LIMIT: int = 10
CHAT_MAX_TOKENS: int = 300
CHAT_TEMPERATURE: float = 0.8

CHAT_FALLBACK_REPLY: str = (
    "I'm having trouble responding right now, but I'm still here for you. "
    "Would you like to write about what's on your mind in today's journal?"
)
CHAT_MISSING_KEY_REPLY: str = "Please configure your OpenAI API key to chat with your journal companion."

# 🪂 Fallbacks
SUMMARY_UNAVAILABLE_MESSAGE: str = (
    "Unable to generate AI summary at the moment. Here's what we can see from your week:"
)
MISSING_KEY_MESSAGE: str = "Please configure your OpenAI API key to enable AI summaries."

FALLBACK_SUMMARY_EMPTY: str = (
    "You haven't written any entries this week. "
    "Consider starting with how you're feeling right now!"
)
FALLBACK_SUMMARY_SINGLE: str = (
    "You wrote 1 entry this week. Your mood was {mood:.1f}/4.0. Keep building this healthy habit!"
)
FALLBACK_SUMMARY_MULTIPLE: str = (
    "You wrote {count} entries this week with an average mood of {mood:.1f}/4.0. "
    "Your week seems to have been {band}. Keep reflecting on your experiences!"
)

DEFAULT_RECOMMENDATION_FIELDS: Dict[str, str] = {
    "icon": "lightbulb.fill",
    "title": "Recommendation {number}",
    "description": "A helpful suggestion for you.",
    "actionText": "Take action",
    "category": "growth",
    "priority": "medium",
}

PADDING_RECOMMENDATION: Dict[str, Any] = {
    "icon": "pencil.and.outline",
    "title": "Journal Reflection",
    "description": "Take a moment to reflect on your recent experiences.",
    "action_text": "Write: 'What am I learning about myself lately?'",
    "category": "growth",
    "priority": "medium",
}

LOW_MOOD_RECOMMENDATIONS: List[Dict[str, Any]] = [
    {
        "icon": "pencil.and.outline",
        "title": "Journal: Self-Compassion",
        "description": "Your recent entries suggest you're being hard on yourself. Let's explore self-kindness.",
        "action_text": "Write: 'What would I tell a good friend going through what I'm experiencing?'",
        "category": "growth",
        "priority": "high",
    },
    {
        "icon": "pencil.and.outline",
        "title": "Journal: Small Wins",
        "description": "Focus on the positive moments, however small they might be.",
        "action_text": "Write about three small things that went well this week",
        "category": "growth",
        "priority": "medium",
    },
    {
        "icon": "figure.walk",
        "title": "Gentle Movement",
        "description": "A short walk can help shift your energy and perspective.",
        "action_text": "Take a 10-minute walk outside and notice your surroundings",
        "category": "lifestyle",
        "priority": "medium",
    },
]

STABLE_MOOD_RECOMMENDATIONS: List[Dict[str, Any]] = [
    {
        "icon": "pencil.and.outline",
        "title": "Journal: Gratitude Reflection",
        "description": "Your mood has been stable. Let's explore what you're grateful for.",
        "action_text": "Write: 'Three things I'm genuinely grateful for right now are...'",
        "category": "growth",
        "priority": "medium",
    },
    {
        "icon": "pencil.and.outline",
        "title": "Journal: Future Self",
        "description": "You're in a good headspace to think about your goals and aspirations.",
        "action_text": "Write a letter to yourself one month from now",
        "category": "growth",
        "priority": "medium",
    },
    {
        "icon": "wind",
        "title": "Mindful Breathing",
        "description": "Take a moment to center yourself with conscious breathing.",
        "action_text": "Practice 4-7-8 breathing for 5 minutes",
        "category": "mindfulness",
        "priority": "low",
    },
]

# 💬 Motivation, keyed by total entry count
MOTIVATION_NO_ENTRIES: str = "Welcome to your journaling journey! Start by writing your first entry today."
MOTIVATION_GETTING_STARTED: str = (
    "Great start! You're building a healthy habit. Keep writing to unlock deeper insights."
)
MOTIVATION_BUILDING: str = (
    "You're on a roll! Your consistency is paying off. Notice any patterns in your mood?"
)
MOTIVATION_ESTABLISHED: str = (
    "Impressive dedication! You're developing real self-awareness through your entries."
)
MOTIVATION_SEASONED: str = (
    "You're a journaling champion! Your commitment to self-reflection is truly inspiring."
)
