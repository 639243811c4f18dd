"""
monster_ai package – Turn-based monster decision engine.

Modules:
    monster_agent         – Per-monster façade (MonsterAgent) running the decision pipeline
    turn_manager          – Agent registry and battle turn loop
    intent_selector       – Tier dispatch, turn-count table, intent cache
    tier_strategy         – Basic / Elite / MiniBoss / Boss decision tables
    personality_modifier  – Personality post-processing of the chosen pattern
    phase_system          – Health-threshold phases
    enrage_mode           – One-way low-HP rage
    profiles              – Tier, Personality, AgentTraits, TierProfile
    agent_state           – Per-agent mutable decision state
    tag_matcher           – Keyword matching, strongest / random pattern lookup
    context               – AiContext (catalog, RNG, matcher, selector)
    errors                – Engine exceptions
    stats                 – Per-agent decision statistics and charts
    simulation_runner     – Headless seeded simulations
"""
