from sqlalchemy.orm import Session
from career_readiness.core.database import SessionLocal
from career_readiness.models.entities import (
    CareerPath,
    CareerPillar,
    CareerOpportunity,
    OpportunityType,
    UnlockRule,
)


PILLARS = [
    ("Academic Readiness", 1.0),
    ("Skill Development", 1.0),
    ("Exposure & Networking", 1.0),
    ("Proof & Portfolio", 1.0),
]

# title -> (type, difficulty, description, next action label, instructions, rules)
# rules: (required_cycle_number, required_pillar, required_milestone_completion_rate)
OPPORTUNITIES = {
    "Software Engineer": {
        "Campus Tech Talk Series": (
            "event",
            1,
            "Attend a talk series run by local engineering teams.",
            "RSVP",
            "Register with your school email and attend at least one talk.",
            [(None, None, 0)],
        ),
        "Intro to Cloud Certification Voucher": (
            "certification",
            1,
            "Discounted voucher for an entry-level cloud certification exam.",
            "Claim voucher",
            "Request the voucher code from your advisor before the exam window closes.",
            [(None, "Skill Development", 30)],
        ),
        "Regional Hackathon": (
            "competition",
            2,
            "Weekend hackathon with mentors from partner companies.",
            "Form a team",
            "Find two teammates and register before the deadline.",
            [(2, None, 50), (None, "Proof & Portfolio", 0)],
        ),
        "Summer Engineering Bootcamp": (
            "program",
            2,
            "Six-week project-based bootcamp for high school students.",
            "Apply",
            "Submit the application form with one project link.",
            [(2, "Skill Development", 60)],
        ),
        "STEM Scholarship": (
            "scholarship",
            3,
            "Merit scholarship for students with a documented project portfolio.",
            "Start application",
            "Write the 500-word essay and attach your portfolio.",
            [(3, "Academic Readiness", 70), (None, "Proof & Portfolio", 70)],
        ),
        "Junior Developer Internship": (
            "internship",
            3,
            "Paid summer internship shadowing a product engineering team.",
            "Request referral",
            "Ask your mentor for a referral and send your resume.",
            [(3, "Exposure & Networking", 80)],
        ),
    },
}


def get_or_create(session: Session, model, defaults=None, **kwargs):
    instance = session.query(model).filter_by(**kwargs).one_or_none()
    if instance:
        return instance
    params = dict(kwargs)
    if defaults:
        params.update(defaults)
    instance = model(**params)
    session.add(instance)
    session.flush()
    return instance


def ensure_rules(session: Session, opportunity_id, rules):
    if session.query(UnlockRule).filter(UnlockRule.opportunity_id == opportunity_id).count():
        return
    for required_cycle_number, required_pillar, required_rate in rules:
        session.add(
            UnlockRule(
                opportunity_id=opportunity_id,
                required_cycle_number=required_cycle_number,
                required_pillar=required_pillar,
                required_milestone_completion_rate=required_rate,
            )
        )
    session.flush()


def seed():
    session = SessionLocal()
    try:
        for path_name, opportunities in OPPORTUNITIES.items():
            path = get_or_create(
                session,
                CareerPath,
                name=path_name,
                defaults={"description": ""},
            )
            for display_order, (pillar_name, weight) in enumerate(PILLARS):
                get_or_create(
                    session,
                    CareerPillar,
                    career_path_id=path.id,
                    name=pillar_name,
                    defaults={"weight": weight, "display_order": display_order},
                )
            for title, (kind, difficulty, description, label, instructions, rules) in opportunities.items():
                opportunity = get_or_create(
                    session,
                    CareerOpportunity,
                    career_path_id=path.id,
                    title=title,
                    defaults={
                        "type": OpportunityType(kind).value,
                        "difficulty_level": difficulty,
                        "description": description,
                        "next_action_label": label,
                        "next_action_instructions": instructions,
                    },
                )
                ensure_rules(session, opportunity.id, rules)

        session.commit()
    finally:
        session.close()


if __name__ == "__main__":
    seed()
