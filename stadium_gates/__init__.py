"""Stadium entry gate simulation.

A fixed crowd of ticket holders is admitted through a small number of gates:
- VIP ticket holders walk straight in
- half of the crowd is already queued (randomly, then balanced) when doors open
- a background worker admits one person per gate every simulated minute
- newcomers type their serial number at a kiosk and get routed to the
  shortest queue

1 real second = 1 simulated minute. See `stadium_gates.app` for the CLI.
"""

import logging

logging.getLogger(__name__).addHandler(logging.NullHandler())
