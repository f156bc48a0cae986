"""Receipt formatting, ESC/POS encoding and printer transport."""
