"""
Prompt flows for the planner's writing helpers.

Every flow takes a ``TextGenerator`` and plain inputs, and always returns a
displayable value: when the model fails, a fixed default is returned instead.
"""
from __future__ import annotations
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from computations import months_until_wedding
from models import Task
from text_generation import TextGenerator, run_with_fallback
from utils import format_date, new_id, today_str, try_parse_date

AI_TASK_CATEGORY = "AI Suggested"


class ThankYouNote(BaseModel):
    note: str = Field(min_length=1)


class GuestMessage(BaseModel):
    message: str = Field(min_length=1)


class TaskSuggestion(BaseModel):
    title: str = Field(min_length=1)
    description: str = ""
    category: Optional[str] = None


class WeddingTasks(BaseModel):
    tasks: List[TaskSuggestion] = Field(min_length=1)


class VendorQuestions(BaseModel):
    questions: List[str] = Field(min_length=1)


class CoupleVibe(BaseModel):
    vibe: str = Field(min_length=1)


class WeddingTip(BaseModel):
    tip: str = Field(min_length=1)


class TransactionDescription(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    suggested_description: str = Field(alias="suggestedDescription", min_length=1)


DEFAULT_VENDOR_QUESTIONS = [
    "What exactly is included in your package, and what costs extra?",
    "How many weddings like ours have you worked on, and can we see examples?",
    "What is your cancellation and rescheduling policy?",
    "What is your backup plan if something goes wrong on the day?",
]

DEFAULT_TASKS = [
    TaskSuggestion(
        title="Review the budget",
        description="Compare planned and spent amounts per category and adjust allocations.",
        category="Budget",
    ),
    TaskSuggestion(
        title="Confirm pending vendors",
        description="Contact vendors still under consideration and close the remaining contracts.",
        category="Vendors",
    ),
    TaskSuggestion(
        title="Update the guest list",
        description="Follow up on unconfirmed guests and update their status.",
        category="Guests",
    ),
]

DEFAULT_TIP = "Enjoy every moment of the planning: it is part of the wedding journey too!"


def generate_thank_you_note(generator: TextGenerator, gift_name: str, giver_name: Optional[str] = None) -> str:
    giver_line = f"The gift was given by: {giver_name}." if giver_name else "The giver's name was not given."
    prompt = (
        "You help newlyweds write thank-you notes for wedding gifts.\n"
        "Write a short, sincere and warm thank-you note.\n"
        f"The gift received was: {gift_name}.\n"
        f"{giver_line}\n\n"
        "The note must:\n"
        f"1. Thank them specifically for the {gift_name}.\n"
        "2. Address the giver warmly when a name is given; otherwise open more generally.\n"
        "3. Say how the gift will be useful or appreciated.\n"
        "4. Express gratitude for their thoughtfulness and generosity.\n"
        "5. End with an affectionate closing and the placeholder \"[Couple's Names]\".\n\n"
        'Answer with JSON: {"note": "..."}'
    )
    greeting = f"Dear {giver_name}" if giver_name else "Dear friends and family"
    fallback = ThankYouNote(note=(
        f"{greeting},\n\n"
        f"Thank you so much for the {gift_name}! It already has a special place in our new home.\n"
        "Your generosity and care mean a lot to us.\n\n"
        "With love,\n[Couple's Names]"
    ))
    return run_with_fallback(generator, prompt, ThankYouNote, fallback).note


def generate_guest_message(generator: TextGenerator, guest_name: str, context: str) -> str:
    prompt = (
        "You are a friendly and helpful wedding planning assistant.\n"
        f"Write a short, polite and warm message for a wedding guest named {guest_name}.\n"
        f"The purpose of the message is: {context}.\n"
        "It should suit WhatsApp or SMS. Keep it personal and cheerful.\n"
        "Use placeholders such as [RSVP Deadline], [Wedding Date] and [Couple's Names] where needed.\n\n"
        'Answer with JSON: {"message": "..."}'
    )
    fallback = GuestMessage(message=f"Hi {guest_name}! {context}. We can't wait to celebrate with you! [Couple's Names]")
    return run_with_fallback(generator, prompt, GuestMessage, fallback).message


def suggest_wedding_tasks(
    generator: TextGenerator,
    wedding_date: str,
    selected_packages: Optional[List[str]] = None,
    user_prompt: Optional[str] = None,
) -> List[TaskSuggestion]:
    """Suggest 3 to 5 planning tasks for the current stage"""
    if try_parse_date(wedding_date) is None:
        formatted, months = "Invalid date", 0
    else:
        formatted, months = format_date(wedding_date), months_until_wedding(wedding_date)
    packages = ", ".join(selected_packages) if selected_packages else "none specific yet"
    request = f'The user asked for help with: "{user_prompt}"\n' if user_prompt else ""
    prompt = (
        "You are an experienced wedding planner.\n"
        f"The wedding date is {formatted}. There are {months} months left until the wedding.\n"
        f"Service packages selected (or being considered): {packages}.\n"
        f"{request}\n"
        "Based on the time left, the packages and the user's request (if any), suggest 3 to 5 "
        "relevant, actionable planning tasks for this moment. Give each a title, a brief "
        "description and optionally a category. Prioritise the user's request when present.\n\n"
        'Answer with JSON: {"tasks": [{"title": "...", "description": "...", "category": "..."}]}'
    )
    return run_with_fallback(generator, prompt, WeddingTasks, WeddingTasks(tasks=DEFAULT_TASKS)).tasks


def task_from_suggestion(suggestion: TaskSuggestion, wedding_date: Optional[str] = None) -> Task:
    """Turn a suggestion into a task due on the wedding date (or today)"""
    return Task(
        id=new_id(),
        title=suggestion.title,
        description=suggestion.description,
        due_date=wedding_date or today_str(),
        status="todo",
        priority="medium",
        category=suggestion.category or AI_TASK_CATEGORY,
    )


def suggest_vendor_questions(generator: TextGenerator, vendor_category: str) -> List[str]:
    prompt = (
        "You are an experienced wedding planning assistant.\n"
        f'For the vendor category "{vendor_category}", suggest 3 to 5 important and specific '
        "questions to ask when contacting or meeting potential vendors of this category.\n"
        "Focus on fit, professionalism, experience and service details. "
        'Avoid generic questions such as "What is your price?".\n\n'
        'Answer with JSON: {"questions": ["..."]}'
    )
    fallback = VendorQuestions(questions=DEFAULT_VENDOR_QUESTIONS)
    return run_with_fallback(generator, prompt, VendorQuestions, fallback).questions


def generate_couple_vibe(generator: TextGenerator, bride_name: str, groom_name: str) -> str:
    prompt = (
        "You are a creative and upbeat wedding assistant.\n"
        f"The couple's names are {bride_name} and {groom_name}.\n"
        'Write a short, fun "couple vibe" for them or a small inspiring quote about love and '
        "marriage. Keep it light, romantic and encouraging. At most 2 sentences.\n\n"
        'Answer with JSON: {"vibe": "..."}'
    )
    fallback = CoupleVibe(vibe=f"May {bride_name} and {groom_name}'s journey be full of love and happiness!")
    return run_with_fallback(generator, prompt, CoupleVibe, fallback).vibe


def get_wedding_tip(generator: TextGenerator, wedding_date: Optional[str] = None) -> str:
    if not wedding_date:
        months_remaining = "unknown"
    elif try_parse_date(wedding_date) is None:
        months_remaining = "invalid date"
    else:
        months_remaining = str(months_until_wedding(wedding_date))
    stage = (
        f"The wedding date is {wedding_date}. About {months_remaining} months are left; "
        "tailor the tip to this stage if possible.\n"
        if wedding_date else "The tip can be general wedding planning advice.\n"
    )
    prompt = (
        "You are an experienced and friendly wedding advisor.\n"
        "Give one useful, concise and inspiring wedding planning tip.\n"
        f"{stage}"
        "Keep it positive and encouraging and avoid clichés.\n\n"
        'Answer with JSON: {"tip": "..."}'
    )
    return run_with_fallback(generator, prompt, WeddingTip, WeddingTip(tip=DEFAULT_TIP)).tip


def suggest_transaction_description(
    generator: TextGenerator,
    amount: float,
    category_name: str,
    transaction_type: str,
    current_description: Optional[str] = None,
) -> str:
    """transaction_type is "income" or "expense" """
    current = f'Current description (to improve): "{current_description}"\n' if current_description else ""
    prompt = (
        "You are a financial assistant for wedding planning.\n"
        "Help write a clear, detailed description for a transaction.\n"
        f"Transaction type: {transaction_type}\n"
        f"Amount: {amount}\n"
        f"Category: {category_name}\n"
        f"{current}\n"
        'For expenses you may start with "Payment for..." or "Expense with..."; for income '
        'with "Income from..." or "Received...". Try to infer the specific service or item.\n\n'
        'Answer with JSON: {"suggestedDescription": "..."}'
    )
    prefix = "Expense with" if transaction_type == "expense" else "Income from"
    suffix = f" - {current_description}" if current_description else ""
    fallback = TransactionDescription(suggested_description=f"{prefix} {category_name}{suffix}")
    return run_with_fallback(generator, prompt, TransactionDescription, fallback).suggested_description
