"""Define type aliases used throughout the network simulation."""
import torch

AirportCode = str
Time = torch.tensor
