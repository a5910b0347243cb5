"""Scenario library with 12 starter scenarios."""

import random
from typing import List, Dict, Optional

from game.models import Option, OptionType, Scenario

# Raw scenario data. Safe/wild options carry base_change, risk options carry
# success_rate plus win_amount/loss_amount.
SCENARIO_DATA: List[Dict] = [
    {
        'id': 'elevator',
        'text': 'You walk into a packed elevator. Everyone goes silent.',
        'options': [
            {'id': 'nod', 'text': 'Give a respectful nod', 'type': 'safe', 'base_change': 100},
            {'id': 'joke', 'text': 'Crack a joke about the silence', 'type': 'risk',
             'success_rate': 0.5, 'win_amount': 800, 'loss_amount': -600},
            {'id': 'beatbox', 'text': 'Start beatboxing', 'type': 'wild', 'base_change': -300},
        ],
    },
    {
        'id': 'wave_back',
        'text': 'Someone waves in your direction. You wave back. They were waving at the person behind you.',
        'options': [
            {'id': 'stretch', 'text': 'Turn it into a stretch', 'type': 'safe', 'base_change': 50},
            {'id': 'commit', 'text': 'Commit and walk over to say hi', 'type': 'risk',
             'success_rate': 0.3, 'win_amount': 1500, 'loss_amount': -1200},
            {'id': 'vanish', 'text': 'Sprint out of the building', 'type': 'wild', 'base_change': -800},
        ],
    },
    {
        'id': 'group_project',
        'text': 'Group project presentation. Your teammate did nothing and is now presenting your slides.',
        'options': [
            {'id': 'let_it_slide', 'text': 'Let it slide, you know the truth', 'type': 'safe', 'base_change': 200},
            {'id': 'call_out', 'text': 'Ask them a question only the author would know', 'type': 'risk',
             'success_rate': 0.6, 'win_amount': 1200, 'loss_amount': -900},
            {'id': 'standing_ovation', 'text': 'Give them a standing ovation', 'type': 'wild', 'base_change': 600},
        ],
    },
    {
        'id': 'trip',
        'text': 'You trip on flat ground in front of your crush.',
        'options': [
            {'id': 'keep_walking', 'text': 'Keep walking like nothing happened', 'type': 'safe', 'base_change': 0},
            {'id': 'parkour', 'text': 'Turn it into a parkour roll', 'type': 'risk',
             'success_rate': 0.25, 'win_amount': 2500, 'loss_amount': -2000},
            {'id': 'lie_down', 'text': 'Lie down and stay there', 'type': 'wild', 'base_change': 400},
        ],
    },
    {
        'id': 'aux_cord',
        'text': 'Someone hands you the aux cord at the party.',
        'options': [
            {'id': 'top_hits', 'text': 'Play the current top hits', 'type': 'safe', 'base_change': 300},
            {'id': 'deep_cut', 'text': 'Play an obscure deep cut', 'type': 'risk',
             'success_rate': 0.4, 'win_amount': 2000, 'loss_amount': -1500},
            {'id': 'own_mixtape', 'text': 'Play your own mixtape', 'type': 'wild', 'base_change': -1000},
        ],
    },
    {
        'id': 'reply_all',
        'text': 'You accidentally reply-all to the company newsletter.',
        'options': [
            {'id': 'apologize', 'text': 'Send a short apology', 'type': 'safe', 'base_change': -100},
            {'id': 'double_down', 'text': 'Double down with a hot take', 'type': 'risk',
             'success_rate': 0.2, 'win_amount': 3000, 'loss_amount': -2500},
            {'id': 'meme', 'text': 'Reply-all again with a meme', 'type': 'wild', 'base_change': 700},
        ],
    },
    {
        'id': 'bill_split',
        'text': 'The bill arrives and everyone looks at you.',
        'options': [
            {'id': 'split', 'text': 'Suggest splitting evenly', 'type': 'safe', 'base_change': 150},
            {'id': 'cover_all', 'text': 'Cover the whole table', 'type': 'risk',
             'success_rate': 0.7, 'win_amount': 1000, 'loss_amount': -700},
            {'id': 'dine_and_dash', 'text': 'Stand up and leave without a word', 'type': 'wild', 'base_change': -1500},
        ],
    },
    {
        'id': 'gym_mirror',
        'text': 'You get caught flexing in the gym mirror.',
        'options': [
            {'id': 'fix_hair', 'text': 'Pretend you were fixing your hair', 'type': 'safe', 'base_change': 50},
            {'id': 'flex_harder', 'text': 'Flex harder and hold eye contact', 'type': 'risk',
             'success_rate': 0.45, 'win_amount': 1800, 'loss_amount': -1400},
            {'id': 'pose_off', 'text': 'Challenge them to a pose-off', 'type': 'wild', 'base_change': 900},
        ],
    },
    {
        'id': 'name_forgot',
        'text': 'Someone greets you by name. You have no idea who they are.',
        'options': [
            {'id': 'hey_you', 'text': '"Heyyy you!"', 'type': 'safe', 'base_change': 100},
            {'id': 'guess', 'text': 'Guess their name confidently', 'type': 'risk',
             'success_rate': 0.15, 'win_amount': 3500, 'loss_amount': -2000},
            {'id': 'fake_call', 'text': 'Fake a phone call immediately', 'type': 'wild', 'base_change': -400},
        ],
    },
    {
        'id': 'presentation_typo',
        'text': 'Your boss points out a typo on your slide in front of the whole team.',
        'options': [
            {'id': 'fix_it', 'text': 'Thank them and fix it', 'type': 'safe', 'base_change': 200},
            {'id': 'intentional', 'text': 'Claim it was an attention test', 'type': 'risk',
             'success_rate': 0.35, 'win_amount': 2200, 'loss_amount': -1800},
            {'id': 'resign', 'text': 'Announce your resignation on the spot', 'type': 'wild', 'base_change': -3000},
        ],
    },
    {
        'id': 'dance_floor',
        'text': 'The DJ calls you out to the middle of the dance floor.',
        'options': [
            {'id': 'two_step', 'text': 'Do a modest two-step', 'type': 'safe', 'base_change': 250},
            {'id': 'breakdance', 'text': 'Attempt a backspin', 'type': 'risk',
             'success_rate': 0.3, 'win_amount': 3000, 'loss_amount': -2500},
            {'id': 'worm', 'text': 'Do the worm', 'type': 'wild', 'base_change': 1200},
        ],
    },
    {
        'id': 'left_on_read',
        'text': 'Your message has been left on read for three days.',
        'options': [
            {'id': 'move_on', 'text': 'Move on with your life', 'type': 'safe', 'base_change': 300},
            {'id': 'follow_up', 'text': 'Send a witty follow-up', 'type': 'risk',
             'success_rate': 0.4, 'win_amount': 1600, 'loss_amount': -1600},
            {'id': 'voice_memo', 'text': 'Send a 9 minute voice memo', 'type': 'wild', 'base_change': -2000},
        ],
    },
]


def _build_scenario(data: Dict) -> Scenario:
    options = tuple(
        Option(
            id=o['id'],
            text=o['text'],
            type=OptionType(o['type']),
            base_change=o.get('base_change'),
            success_rate=o.get('success_rate'),
            win_amount=o.get('win_amount'),
            loss_amount=o.get('loss_amount'),
        )
        for o in data['options']
    )
    return Scenario(id=data['id'], text=data['text'], options=options)


SCENARIOS: List[Scenario] = [_build_scenario(s) for s in SCENARIO_DATA]


def get_scenario_by_id(scenario_id: str) -> Optional[Scenario]:
    """Get a scenario by its ID."""
    for scenario in SCENARIOS:
        if scenario.id == scenario_id:
            return scenario
    return None


def get_random_scenario(pool: Optional[List[Scenario]] = None, rng=random) -> Scenario:
    """Draw a scenario uniformly at random; repeats are allowed."""
    return rng.choice(pool or SCENARIOS)


def get_all_scenarios() -> List[Scenario]:
    """Get all scenarios."""
    return SCENARIOS


def get_scenario_count() -> int:
    """Get the total number of scenarios."""
    return len(SCENARIOS)
