"""Pre-authored supportive replies, one per triage category."""

CRISIS_REPLY = (
    "I'm really sorry you're feeling this way, and I'm glad you told me. "
    "You deserve support right now.\n\n"
    "If you are in immediate danger, please reach out now:\n"
    "• Emergency services: 911 (US) or your local emergency number\n"
    "• 988 Suicide & Crisis Lifeline: call or text 988 (US)\n"
    "• Crisis Text Line: text HOME to 741741\n"
    "• Outside the US: find a local helpline at findahelpline.com\n\n"
    "You don't have to go through this alone. Is there someone you trust "
    "who can stay with you right now?"
)

HELP_MENU_REPLY = (
    "I'm here to help. Here are a few things we can do together:\n"
    "• Talk through what's on your mind\n"
    "• Try a breathing or grounding exercise\n"
    "• Log your mood to notice patterns over time\n"
    "• Write a journal entry to untangle your thoughts\n"
    "• Find professional support and resources\n\n"
    "What feels most useful right now?"
)

ANXIETY_REPLY = (
    "Anxiety can feel overwhelming, but you're not alone in this. "
    "A few techniques that often help:\n"
    "• Box breathing: in for 4, hold for 4, out for 4, hold for 4\n"
    "• 5-4-3-2-1 grounding: name 5 things you see, 4 you can touch, "
    "3 you hear, 2 you smell, 1 you taste\n"
    "• Name the worry, then ask: what's in my control right now?\n\n"
    "Would you like to try one of these together?"
)

DEPRESSION_REPLY = (
    "I hear you, and it's okay to feel this way. "
    "Feelings like these are heavy, but they do shift over time.\n"
    "• Try one small, kind action for yourself today\n"
    "• Reach out to someone you trust, even with a short message\n"
    "• Step outside for a few minutes of daylight if you can\n\n"
    "If this low mood has lasted more than two weeks, talking to a "
    "professional can really help. Is there someone you can talk to?"
)

STRESS_REPLY = (
    "Stress can pile up quickly. Let's break it down:\n"
    "• Write down everything that's weighing on you\n"
    "• Pick the one item that matters most today\n"
    "• Break it into the smallest possible next step\n"
    "• Schedule a short break, even 5 minutes\n\n"
    "What's one small thing you can do right now?"
)

SLEEP_REPLY = (
    "Sleep troubles can make everything feel harder. Some habits that help:\n"
    "• Keep the same wake-up time every day\n"
    "• Avoid caffeine after early afternoon\n"
    "• Put screens away 30-60 minutes before bed\n"
    "• Try a body scan or slow breathing once you're in bed\n"
    "• If you can't sleep after 20 minutes, get up and do something calm\n\n"
    "Which of these could you try tonight?"
)

RESOURCE_REPLY = (
    "Reaching out for professional support is a strong step. Some places to start:\n"
    "• Your primary care doctor can refer you to a therapist\n"
    "• Psychology Today's therapist directory lists local options\n"
    "• Online therapy services such as BetterHelp or Talkspace\n"
    "• SAMHSA National Helpline: 1-800-662-4357 (free, 24/7)\n"
    "• The Resources page lists more services you can explore\n\n"
    "Would you like tips on what to ask a therapist in a first session?"
)

GREETING_REPLY = (
    "Hello, it's good to hear from you. "
    "I'm here to listen and support you.\n\n"
    "How are you feeling today?"
)

COPING_QUESTION_REPLY = (
    "That's a great question. Some coping strategies that many people find helpful:\n"
    "• Slow breathing to calm your body\n"
    "• Moving your body, even a short walk\n"
    "• Writing your thoughts down in a journal\n"
    "• Talking to someone you trust\n\n"
    "Which situation would you like to work through?"
)

QUESTION_REPLY = (
    "That's a thoughtful question. "
    "Could you tell me a little more about what's going on, "
    "so I can support you better?"
)

GRATITUDE_REPLY = (
    "You're very welcome. I'm glad I could be here for you.\n\n"
    "Remember, you can come back and talk anytime."
)

IMPROVEMENT_REPLY = (
    "That's wonderful to hear! Noticing the good moments matters.\n"
    "• Take a moment to notice what helped you feel this way\n"
    "• Consider writing it down so you can come back to it\n\n"
    "Keep going, you're doing great."
)

LONELINESS_REPLY = (
    "Feeling lonely is painful, and I'm glad you reached out. "
    "A few ways to reconnect:\n"
    "• Send a short message to someone you haven't talked to in a while\n"
    "• Join a class, club, or online community around something you enjoy\n"
    "• Volunteer, helping others builds connection too\n"
    "• Look for a local or online support group\n\n"
    "Who is one person you could reach out to today?"
)

ANGER_REPLY = (
    "It sounds like you're really frustrated, and that's a valid feeling. "
    "Some ways to work with anger:\n"
    "• Pause and take 10 slow breaths before reacting\n"
    "• Step away and move your body for a few minutes\n"
    "• Write down what triggered you and what you needed\n\n"
    "What happened that made you feel this way?"
)

GENERAL_REPLY = (
    "Thank you for sharing that with me. It sounds important.\n\n"
    "Take a deep breath. What has helped you in the past when you felt similar?"
)
